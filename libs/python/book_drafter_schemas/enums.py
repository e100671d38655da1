"""Enum definitions shared across the generation pipeline."""

from __future__ import annotations

from enum import Enum


class PublicationType(str, Enum):
    ACADEMIC = "academic"
    GENERAL = "general"
    TECHNICAL = "technical"
    TUTORIAL = "tutorial"
    CASE_STUDY = "case-study"
    WORKBOOK = "workbook"


class Tone(str, Enum):
    FORMAL = "formal"
    PROFESSIONAL = "professional"
    INFORMAL = "informal"


class Audience(str, Enum):
    PROFESSIONALS = "professionals"
    GENERAL = "general"
    ADULTS = "adults"
    YOUTH = "youth"


class OutputLanguage(str, Enum):
    ES = "es"
    EN = "en"


class GenerationState(str, Enum):
    IDLE = "IDLE"
    OUTLINE_GENERATING = "OUTLINE_GENERATING"
    OUTLINE_READY = "OUTLINE_READY"
    SECTIONS_GENERATING = "SECTIONS_GENERATING"
    COMPLETE = "COMPLETE"
    ERROR = "ERROR"


class PipelineStage(str, Enum):
    """Stage labels used for logging and metrics."""

    OUTLINE = "outline"
    SECTION = "section"
    REFERENCES = "references"


class LeafKind(str, Enum):
    INTRODUCTION = "introduction"
    SECTION = "section"
    CONCLUSION = "conclusion"
