"""Hebrew/English recipe extraction: structured data first, AI when needed."""
