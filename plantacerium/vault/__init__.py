from plantacerium.vault.json_store import JsonVaultStore
from plantacerium.vault.note_vault import NoteVault, decode_record, encode_entry

__all__ = ["JsonVaultStore", "NoteVault", "decode_record", "encode_entry"]
