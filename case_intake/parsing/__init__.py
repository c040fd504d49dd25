"""Roster parsing: tokenizer, realigner, field mapper and date normalizer."""
