"""Domain models describing generation parameters, outlines, and books."""

from __future__ import annotations

from typing import Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..enums import (
    Audience,
    GenerationState,
    LeafKind,
    OutputLanguage,
    PublicationType,
    Tone,
)

MIN_CHAPTERS = 5
MAX_CHAPTERS = 20
MIN_TARGET_WORDS = 10_000
MAX_TARGET_WORDS = 60_000


class GenerationParameters(BaseModel):
    """User-selected options for a generation run. Immutable once a run starts."""

    model_config = ConfigDict(frozen=True)

    publication_type: PublicationType = PublicationType.ACADEMIC
    tone: Tone = Tone.FORMAL
    audience: Audience = Audience.PROFESSIONALS
    chapter_count: int = Field(7, ge=MIN_CHAPTERS, le=MAX_CHAPTERS)
    target_word_count: int = Field(25_000, ge=MIN_TARGET_WORDS, le=MAX_TARGET_WORDS)
    output_language: OutputLanguage = OutputLanguage.ES
    source_material: Optional[str] = Field(
        None, description="Optional user-provided base material used as primary source"
    )

    @field_validator("source_material")
    @classmethod
    def normalise_source_material(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None


class OutlineNode(BaseModel):
    """Introduction or conclusion node of the outline."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1)


class OutlineChapter(BaseModel):
    """Chapter node with its ordered section titles."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1)
    sections: list[str] = Field(default_factory=list)


class Outline(BaseModel):
    """Structural skeleton of the book: titles only, no body text."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1)
    introduction: OutlineNode
    chapters: list[OutlineChapter]
    conclusion: OutlineNode

    @property
    def total_sections(self) -> int:
        """Number of generated leaves: every chapter section plus intro and conclusion."""

        return sum(len(chapter.sections) for chapter in self.chapters) + 2


class GroundingSource(BaseModel):
    """Citation metadata returned alongside web-grounded text."""

    uri: Optional[str] = None
    title: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (self.uri or "").strip() and not (self.title or "").strip()


class SectionContent(BaseModel):
    """Realized content for one outline leaf."""

    title: str
    text: str = ""
    references: list[str] = Field(default_factory=list)
    sources: list[GroundingSource] = Field(default_factory=list)

    @property
    def is_written(self) -> bool:
        return bool(self.text)


class GeneratedChapter(BaseModel):
    """Chapter of the accumulator; ``content`` grows in section order."""

    title: str
    sections: list[str] = Field(default_factory=list)
    content: list[SectionContent] = Field(default_factory=list)


class GeneratedBook(BaseModel):
    """Progressively filled book accumulator."""

    title: str
    introduction: SectionContent
    chapters: list[GeneratedChapter] = Field(default_factory=list)
    conclusion: SectionContent
    references: list[str] = Field(default_factory=list)
    references_degraded: bool = False
    output_language: OutputLanguage = OutputLanguage.ES

    @classmethod
    def skeleton(cls, outline: Outline, output_language: OutputLanguage) -> "GeneratedBook":
        """Build an outline-shaped book with empty content."""

        return cls(
            title=outline.title,
            introduction=SectionContent(title=outline.introduction.title),
            chapters=[
                GeneratedChapter(title=chapter.title, sections=list(chapter.sections))
                for chapter in outline.chapters
            ],
            conclusion=SectionContent(title=outline.conclusion.title),
            output_language=output_language,
        )

    def leaves(self) -> Iterator[tuple[LeafKind, int | None, int | None, SectionContent | None]]:
        """Yield every leaf in traversal order with its content, or ``None`` if unwritten."""

        yield (
            LeafKind.INTRODUCTION,
            None,
            None,
            self.introduction if self.introduction.is_written else None,
        )
        for chapter_index, chapter in enumerate(self.chapters):
            for section_index in range(len(chapter.sections)):
                content = (
                    chapter.content[section_index]
                    if section_index < len(chapter.content)
                    else None
                )
                yield LeafKind.SECTION, chapter_index, section_index, content
        yield (
            LeafKind.CONCLUSION,
            None,
            None,
            self.conclusion if self.conclusion.is_written else None,
        )

    def written_sections(self) -> list[SectionContent]:
        return [content for *_, content in self.leaves() if content is not None]

    def all_sources(self) -> list[GroundingSource]:
        """Grounding sources of every written leaf, in traversal order."""

        return [source for content in self.written_sections() for source in content.sources]

    def section_references(self) -> list[str]:
        """Deduplicated, sorted per-section reference lines."""

        unique = {
            reference.strip()
            for content in self.written_sections()
            for reference in content.references
            if reference.strip()
        }
        return sorted(unique)


class ProgressSnapshot(BaseModel):
    """Telemetry published to observers after every completed leaf."""

    state: GenerationState
    total_sections: int = Field(0, ge=0)
    completed_sections: int = Field(0, ge=0)
    percentage: float = Field(0.0, ge=0, le=100)
    word_count: int = Field(0, ge=0)
    current_task: str = ""
    book: Optional[GeneratedBook] = None

    @field_validator("completed_sections")
    @classmethod
    def validate_section_progress(cls, completed: int, info) -> int:
        total = info.data.get("total_sections", 0)
        if total and completed > total:
            raise ValueError("Completed sections cannot exceed total sections")
        return completed
