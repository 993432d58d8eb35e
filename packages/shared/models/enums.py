from enum import Enum


class ExtractionState(str, Enum):
    EMPTY = "empty"
    PARTIALLY_EXTRACTED = "partially_extracted"
    COMPLETE = "complete"
    AWAITING_RESOLUTION = "awaiting_resolution"  # Incomplete, resolver not yet consulted
    FAILED = "failed"


class EntryPath(str, Enum):
    AMBIENT_DICTATION = "ambient_dictation"
    MANUAL_ENTRY = "manual_entry"
    DOCUMENT_UPLOAD = "document_upload"
    AUDIO_TRANSCRIPTION = "audio_transcription"


class ChainName(str, Enum):
    QUICK_ADD = "QuickAddQHC"
    LABS = "ATTACHMENT PROCESSING (LABS)"
    SLEEP_STUDY = "ATTACHMENT PROCESSING (SLEEP STUDY)"
    RESEARCH_STUDY = "ATTACHMENT PROCESSING (RESEARCH STUDY)"
    REFERRAL = "REFERRAL PROCESSING"
    CLIENT_REPORT = "CLIENT REPORT SENT"
    SLEEP_RESULTS = "SLEEP STUDY RESULTS"


class AutomationStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
