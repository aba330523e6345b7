"""
gemscribe - Gemini-powered subtitle generation.

Turns local audio/video files into SRT subtitles through a four-stage
pipeline: file upload → server-side processing poll → content generation →
fenced-output extraction, plus text-to-text passes for topic analysis,
term dictionaries, and dictionary-guided refinement.
"""

__version__ = "0.1.0"
