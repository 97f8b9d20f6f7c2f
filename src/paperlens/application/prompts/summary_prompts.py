from __future__ import annotations

SUMMARY_SYSTEM = """You are an expert research assistant who summarizes academic papers
for readers across disciplines. Be accurate and stay grounded in the provided
title and abstract. Do not invent results, datasets or numbers."""

SHORT_SUMMARY_USER = """Title: {title}
Authors: {authors}
Domain: {domain}
Abstract: {abstract}

Summarize the key points of this paper as 3-5 bullet points.
Each bullet starts with "• " and is a single sentence.
Return only the bullet points."""

MEDIUM_SUMMARY_USER = """Title: {title}
Authors: {authors}
Domain: {domain}
Journal: {journal}
Abstract: {abstract}

Write a 3-4 paragraph synthesis of this paper covering the research problem,
the approach, the main findings and why they matter.
Return plain text paragraphs separated by blank lines."""

DETAILED_SUMMARY_USER = """Title: {title}
Authors: {authors}
Domain: {domain}
Journal: {journal}
Published: {published}
Abstract: {abstract}

Write a detailed analysis of this paper with these sections, each introduced
by its heading on its own line:
Background
Methodology
Key Findings
Implications
Limitations
Future Work

Return plain text without markdown."""
