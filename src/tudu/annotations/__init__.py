"""Annotation grammar: TODO/FIXME parenthesized IDs and attributes."""

from tudu.annotations.parser import ParseResult, parse_annotation, parse_attributes, parse_line

__all__ = ["ParseResult", "parse_annotation", "parse_attributes", "parse_line"]
