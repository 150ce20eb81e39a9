"""Release preparation: audits, scratch branch work, verification, promotion."""
