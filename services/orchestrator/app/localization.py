"""Per-language strings used by prompts, task labels, errors and exports.

All language-dependent text lives in :data:`LANGUAGE_PACKS`; the prompt
templates in each stage package are language-neutral and are rendered with
:meth:`LanguagePack.render`.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict

from book_drafter_schemas import Audience, OutputLanguage, PublicationType, Tone


@dataclass(frozen=True)
class LanguagePack:
    code: str
    thousands_separator: str

    # Enum labels shown to the model and the reader.
    publication_types: Dict[PublicationType, str] = field(default_factory=dict)
    tones: Dict[Tone, str] = field(default_factory=dict)
    audiences: Dict[Audience, str] = field(default_factory=dict)

    # Outline request.
    outline_system: str = ""
    outline_main: str = ""
    publication_params: str = ""
    type_label: str = ""
    tone_label: str = ""
    audience_label: str = ""
    main_topic_label: str = ""
    base_material_label: str = ""
    structure_requirements: str = ""
    outline_word_count: str = ""
    outline_chapters: str = ""
    outline_sections: str = ""
    outline_casing: str = ""

    # Section request.
    section_system: str = ""
    section_task: str = ""
    book_context: str = ""
    overall_topic_label: str = ""
    publication_type_label: str = ""
    desired_tone_label: str = ""
    section_audience_label: str = ""
    section_to_write: str = ""
    chapter_label: str = ""
    section_label: str = ""
    writing_instructions: str = ""
    section_word_count: str = ""
    section_style: str = ""
    search_academic: str = ""
    search_general: str = ""
    citations: str = ""
    dialogue: str = ""
    references_instruction: str = ""
    reference_sentinel: str = ""

    # Reference consolidation request.
    references_system: str = ""
    references_task: str = ""
    references_rules: str = ""
    sources_label: str = ""

    # Reader-facing labels.
    introduction_title: str = ""
    conclusion_title: str = ""
    chapter_heading: str = ""
    references_heading: str = ""

    # Progress task labels.
    task_outline: str = ""
    task_introduction: str = ""
    task_section: str = ""
    task_conclusion: str = ""
    task_references: str = ""
    task_complete: str = ""

    # User-facing errors.
    topic_required: str = ""
    outline_error: str = ""
    section_error: str = ""
    references_error: str = ""
    cancelled: str = ""

    def format_number(self, value: int) -> str:
        return f"{value:,}".replace(",", self.thousands_separator)

    def publication_type(self, value: PublicationType) -> str:
        return self.publication_types.get(value, value.value)

    def tone(self, value: Tone) -> str:
        return self.tones.get(value, value.value)

    def audience(self, value: Audience) -> str:
        return self.audiences.get(value, value.value)

    def render(self, template: str, **values: Any) -> str:
        """Fill ``template`` with this pack's strings plus ``values``."""

        labels = {key: value for key, value in asdict(self).items() if isinstance(value, str)}
        labels.update(values)
        return template.format(**labels)


SPANISH = LanguagePack(
    code="es",
    thousands_separator=".",
    publication_types={
        PublicationType.ACADEMIC: "académica",
        PublicationType.GENERAL: "difusión general",
        PublicationType.TECHNICAL: "técnica",
        PublicationType.TUTORIAL: "tutorial",
        PublicationType.CASE_STUDY: "libro de casos",
        PublicationType.WORKBOOK: "cuaderno de ejercicios",
    },
    tones={
        Tone.FORMAL: "formal",
        Tone.PROFESSIONAL: "profesional",
        Tone.INFORMAL: "informal",
    },
    audiences={
        Audience.PROFESSIONALS: "profesionales",
        Audience.GENERAL: "público general",
        Audience.ADULTS: "adultos",
        Audience.YOUTH: "jóvenes",
    },
    outline_system=(
        "Eres un experto editor y planificador de contenido. Tu tarea es estructurar un libro "
        "completo a partir de un tema y unos parámetros específicos. Tu respuesta debe ser "
        "únicamente el objeto JSON solicitado, sin explicaciones adicionales."
    ),
    outline_main=(
        "Crea una estructura detallada para un libro basado en el siguiente artículo o tema. "
        "Toda la respuesta, incluyendo títulos y secciones, debe estar en español."
    ),
    publication_params="**Parámetros de la publicación:**",
    type_label="- **Tipo:**",
    tone_label="- **Tono:**",
    audience_label="- **Público objetivo:**",
    main_topic_label="- **Tema principal:**",
    base_material_label=(
        "**Material de base proporcionado por el usuario (úsalo como fuente principal):**"
    ),
    structure_requirements="**Requisitos de la estructura:**",
    outline_word_count="- El libro debe tener una extensión aproximada de {word_count} palabras.",
    outline_chapters=(
        "- Debe incluir una introducción, una conclusión y {chapter_count} capítulos principales."
    ),
    outline_sections="- Cada capítulo debe estar dividido en 3 a 5 secciones lógicas.",
    outline_casing=(
        "- En todos los títulos y subtítulos usa mayúscula inicial solo en la primera palabra "
        "y en los nombres propios."
    ),
    section_system=(
        "Eres un escritor académico experto en investigación y redacción. Tu objetivo es "
        "escribir contenido de alta calidad, bien referenciado en formato APA 7, adaptando tu "
        "estilo a los parámetros indicados. Prioriza la información del material de base "
        "proporcionado por el usuario si está disponible."
    ),
    section_task=(
        "Tu tarea es escribir el contenido de una sección concreta de un libro. "
        "La respuesta debe estar en español."
    ),
    book_context="**Contexto del libro:**",
    overall_topic_label="- **Tema general:**",
    publication_type_label="- **Tipo de publicación:**",
    desired_tone_label="- **Tono deseado:**",
    section_audience_label="- **Público objetivo:**",
    section_to_write="**Sección a escribir:**",
    chapter_label="- **Capítulo:**",
    section_label="- **Sección:**",
    writing_instructions="**Instrucciones de escritura:**",
    section_word_count="- El texto de esta sección debe tener aproximadamente {words} palabras.",
    section_style=(
        "- Escribe con el tono y la complejidad adecuados para el tipo de publicación y el "
        "público definidos. En publicaciones académicas o técnicas utiliza un lenguaje preciso "
        "y bien estructurado; en las de difusión general, un lenguaje más accesible."
    ),
    search_academic=(
        "- Investiga y utiliza fuentes fiables usando exclusivamente Google Académico (Google "
        "Scholar) para respaldar TODAS las afirmaciones. Prioriza artículos científicos, tesis "
        "y publicaciones académicas revisadas por pares."
    ),
    search_general=(
        "- Investiga y utiliza fuentes fiables usando la búsqueda de Google para respaldar "
        "TODAS las afirmaciones."
    ),
    citations="- Inserta citas en formato APA (Autor, Año) directamente en el texto cuando sea necesario.",
    dialogue="- Si incluyes diálogos, utiliza el guion largo (—).",
    references_instruction=(
        "- Al final del texto, y claramente separado por '{sentinel}', añade la lista de "
        "referencias completas en formato APA 7 de todas las fuentes citadas."
    ),
    reference_sentinel="###REFERENCIAS###",
    references_system=(
        "Eres un bibliotecario experto en normas APA 7. Respondes únicamente con la lista de "
        "referencias solicitada."
    ),
    references_task=(
        "Genera la bibliografía final del libro \"{topic}\" a partir de las fuentes consultadas "
        "que se enumeran a continuación."
    ),
    references_rules=(
        "- Escribe una referencia en formato APA 7 por cada fuente, una por línea.\n"
        "- Ordena las referencias alfabéticamente por el apellido del autor.\n"
        "- No añadas encabezados, numeración ni comentarios."
    ),
    sources_label="**Fuentes:**",
    introduction_title="Introducción",
    conclusion_title="Conclusión",
    chapter_heading="Capítulo {number}: {title}",
    references_heading="Referencias",
    task_outline="Generando la estructura del libro",
    task_introduction="Escribiendo introducción: {title}",
    task_section="Capítulo {chapter_number}/{chapter_total}: escribiendo sección \"{title}\"",
    task_conclusion="Escribiendo conclusión: {title}",
    task_references="Consolidando referencias",
    task_complete="Libro completado",
    topic_required="Por favor, introduce un tema o un artículo.",
    outline_error=(
        "No se pudo generar la estructura del libro. Revisa los registros para más detalles."
    ),
    section_error="No se pudo generar el contenido para la sección \"{title}\".",
    references_error="No se pudo consolidar la lista de referencias.",
    cancelled="La generación fue cancelada.",
)


ENGLISH = LanguagePack(
    code="en",
    thousands_separator=",",
    publication_types={
        PublicationType.ACADEMIC: "academic",
        PublicationType.GENERAL: "general dissemination",
        PublicationType.TECHNICAL: "technical",
        PublicationType.TUTORIAL: "tutorial",
        PublicationType.CASE_STUDY: "case book",
        PublicationType.WORKBOOK: "workbook",
    },
    tones={
        Tone.FORMAL: "formal",
        Tone.PROFESSIONAL: "professional",
        Tone.INFORMAL: "informal",
    },
    audiences={
        Audience.PROFESSIONALS: "professionals",
        Audience.GENERAL: "general public",
        Audience.ADULTS: "adults",
        Audience.YOUTH: "young readers",
    },
    outline_system=(
        "You are an expert editor and content planner. Your task is to structure a complete "
        "book from a topic and specific parameters. Your response must be solely the requested "
        "JSON object, with no additional explanations."
    ),
    outline_main=(
        "Create a detailed book outline based on the following topic or article. The entire "
        "response, including all titles and sections, must be in English."
    ),
    publication_params="**Publication Parameters:**",
    type_label="- **Type:**",
    tone_label="- **Tone:**",
    audience_label="- **Target Audience:**",
    main_topic_label="- **Main Topic:**",
    base_material_label="**Base material provided by the user (use it as the primary source):**",
    structure_requirements="**Structure Requirements:**",
    outline_word_count="- The book should have an approximate length of {word_count} words.",
    outline_chapters=(
        "- It must include an introduction, a conclusion, and {chapter_count} main chapters."
    ),
    outline_sections="- Each chapter should be divided into 3 to 5 logical sections.",
    outline_casing=(
        "- For all titles and subtitles, use title case (capitalize the first letter of each "
        "major word)."
    ),
    section_system=(
        "You are an expert academic writer specializing in research and composition. Your goal "
        "is to write high-quality, well-referenced content in APA 7 format, adapting your style "
        "to the specified parameters. Prioritize information from the user-provided base "
        "material if available."
    ),
    section_task=(
        "Your task is to write the content for a specific section of a book. "
        "The response must be in English."
    ),
    book_context="**Book Context:**",
    overall_topic_label="- **Overall Topic:**",
    publication_type_label="- **Publication Type:**",
    desired_tone_label="- **Desired Tone:**",
    section_audience_label="- **Target Audience:**",
    section_to_write="**Section to Write:**",
    chapter_label="- **Chapter:**",
    section_label="- **Section:**",
    writing_instructions="**Writing Instructions:**",
    section_word_count="- The text for this section should be approximately {words} words.",
    section_style=(
        "- Write with the appropriate tone and complexity for the defined publication type and "
        "audience. Academic or technical publications need precise, well-structured language; "
        "general dissemination needs more accessible language."
    ),
    search_academic=(
        "- Research and use reliable sources using exclusively Google Scholar to back up ALL "
        "claims. Prioritize peer-reviewed articles, theses and academic publications."
    ),
    search_general="- Research and use reliable sources using Google Search to back up ALL claims.",
    citations="- Insert citations in APA (Author, Year) format directly in the text where necessary.",
    dialogue="- If you include dialogue, use em dashes (—).",
    references_instruction=(
        "- At the end of the text, clearly separated by '{sentinel}', list the full APA 7 "
        "references for all the sources you cited."
    ),
    reference_sentinel="###REFERENCES###",
    references_system=(
        "You are a librarian who is an expert in APA 7 style. You reply only with the requested "
        "reference list."
    ),
    references_task=(
        "Produce the final bibliography for the book \"{topic}\" from the consulted sources "
        "listed below."
    ),
    references_rules=(
        "- Write one APA 7 reference per source, one per line.\n"
        "- Sort the references alphabetically by the author's surname.\n"
        "- Do not add headings, numbering or commentary."
    ),
    sources_label="**Sources:**",
    introduction_title="Introduction",
    conclusion_title="Conclusion",
    chapter_heading="Chapter {number}: {title}",
    references_heading="References",
    task_outline="Generating the book outline",
    task_introduction="Writing introduction: {title}",
    task_section="Chapter {chapter_number}/{chapter_total}: writing section \"{title}\"",
    task_conclusion="Writing conclusion: {title}",
    task_references="Consolidating references",
    task_complete="Book complete",
    topic_required="Please enter a topic or an article.",
    outline_error="Could not generate the book outline. Check the logs for more details.",
    section_error="Could not generate content for section \"{title}\".",
    references_error="Could not consolidate the reference list.",
    cancelled="Generation was cancelled.",
)


LANGUAGE_PACKS: Dict[OutputLanguage, LanguagePack] = {
    OutputLanguage.ES: SPANISH,
    OutputLanguage.EN: ENGLISH,
}


def get_language_pack(language: OutputLanguage | str) -> LanguagePack:
    return LANGUAGE_PACKS[OutputLanguage(language)]


__all__ = ["LANGUAGE_PACKS", "LanguagePack", "get_language_pack"]
