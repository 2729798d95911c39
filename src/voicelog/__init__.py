"""
VoiceLog transcription - pluggable speech-to-text for voice memos.
"""

__version__ = "0.1.0"
__app_name__ = "VoiceLog"
