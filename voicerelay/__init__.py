# voicerelay/__init__.py
# =======================
# VoiceRelay — two-party speech-to-speech interpretation relay
#
# Flow:
#   audio → POST /interpret → transcribe → translate → synthesise
#         → queue of the other participant → GET /stream/{mode}

__version__ = "1.0.0"
