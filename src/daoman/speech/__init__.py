"""Voice capture, transcription and synthesis."""

from .speaker import Speaker, speakable_text
from .stt import GroqTranscriber
from .tts import ElevenLabsSynthesizer
from .voice_store import VoiceReference, VoiceReferenceStore

__all__ = [
    "ElevenLabsSynthesizer",
    "GroqTranscriber",
    "Speaker",
    "VoiceReference",
    "VoiceReferenceStore",
    "speakable_text",
]
