"""
gemscribe.llm - Gemini client and generation passes.

Media pass: upload → wait for ACTIVE → generate from file → strip fence.
Text passes: topic analysis, dictionary construction, and
dictionary-guided refinement.
"""

from __future__ import annotations
