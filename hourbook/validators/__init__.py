"""Validation layer for entry input and business rules."""

from hourbook.validators.entry_validators import EntryRuleValidators, parse_input

__all__ = ["EntryRuleValidators", "parse_input"]
