from .engine import OUTLINE_JSON_SCHEMA, build_outline_prompt, generate_outline

__all__ = ["OUTLINE_JSON_SCHEMA", "build_outline_prompt", "generate_outline"]
