"""Installation instructions for the supported transcription engines."""

SETUP_INSTRUCTIONS = """\
=== VoiceLog Transcription Setup ===

VoiceLog supports optional transcription through external tools.
No installation required - configure only if you want transcription.

Supported transcription engines:

1. whisper.cpp (Recommended - Local, Private)
   - High accuracy, supports many languages
   - Installation: https://github.com/ggerganov/whisper.cpp
   - Download model: https://huggingface.co/ggerganov/whisper.cpp
   - Quick start:
     git clone https://github.com/ggerganov/whisper.cpp
     cd whisper.cpp && make
     ./models/download-ggml-model.sh base.en
   - Options: exec_path, model_path, language (default: en)

2. Vosk (Lightweight, Offline)
   - Fast, good for short memos on modest hardware
   - Installation: https://alphacephei.com/vosk/
   - Download models from: https://alphacephei.com/vosk/models
   - Options: exec_path, model_path

3. OpenAI Whisper API (Cloud-based)
   - Highest accuracy, requires internet & API key
   - Set OPENAI_API_KEY environment variable or configure api_key
   - Install: pip install openai
   - Options: api_key, python_path, model (default: whisper-1)

4. Custom Python Script
   - Use your own script with any API (AssemblyAI, Rev.ai, etc.)
   - Script receives the audio file path as its first argument
     and must print the transcript to standard output
   - Options: script_path

Configuration:
   voicelog-transcribe enable
   voicelog-transcribe set-default whisper.cpp
   voicelog-transcribe configure whisper.cpp model_path=/path/to/ggml-base.en.bin

Usage:
   voicelog-transcribe transcribe memo.wav
   Enable auto-transcribe to have new recordings transcribed automatically
"""


def get_setup_instructions() -> str:
    return SETUP_INSTRUCTIONS


def print_setup_instructions() -> None:
    print(SETUP_INSTRUCTIONS)
