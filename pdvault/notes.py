"""
Secure notes store.

Note content is encrypted with the device key on create and update. Only a
single note fetched by id is decrypted; listings return ciphertext.
"""

import logging
from dataclasses import replace
from typing import Iterable, List, Optional

from .crypto import CryptoManager
from .models import LogStatus, LogType, SecureNote, unique_tags
from .repositories import NoteRepository
from .security_log import SecurityLog
from .utils import Clock, new_id, to_iso, utc_now

logger = logging.getLogger(__name__)


class SecureNoteStore:
    """CRUD over secure notes with transparent content encryption."""

    def __init__(self, repository: NoteRepository, crypto: CryptoManager, device_key: str,
                 security_log: SecurityLog, clock: Clock = utc_now):
        self.repository = repository
        self.crypto = crypto
        self._device_key = device_key
        self.security_log = security_log
        self.clock = clock

    def create_secure_note(self, title: str, content: str, tags: Iterable[str] = ()) -> SecureNote:
        """Create a note. The returned note carries the encrypted content."""
        now = to_iso(self.clock())
        note = SecureNote(
            id=new_id(),
            title=title,
            content=self.crypto.encrypt(content, self._device_key),
            encrypted=True,
            created_at=now,
            updated_at=now,
            tags=unique_tags(tags),
        )
        with self.repository.locked():
            notes = self.repository.load()
            notes.append(note)
            self.repository.save(notes)

        self.security_log.log_security_event(LogType.SECURE_NOTE, LogStatus.SUCCESS, "Secure note created")
        return note

    def update_secure_note(self, note_id: str, title: str, content: str,
                           tags: Iterable[str] = ()) -> Optional[SecureNote]:
        """Replace title, content and tags of a note. Returns None if the note does not exist."""
        with self.repository.locked():
            notes = self.repository.load()
            for i, note in enumerate(notes):
                if note.id == note_id:
                    updated = replace(
                        note,
                        title=title,
                        content=self.crypto.encrypt(content, self._device_key),
                        encrypted=True,
                        tags=unique_tags(tags),
                        updated_at=to_iso(self.clock()),
                    )
                    notes[i] = updated
                    self.repository.save(notes)
                    break
            else:
                return None

        self.security_log.log_security_event(LogType.SECURE_NOTE, LogStatus.SUCCESS, "Secure note updated")
        return updated

    def delete_secure_note(self, note_id: str) -> bool:
        """Delete a note. Returns False, without writing, when the id is unknown."""
        with self.repository.locked():
            notes = self.repository.load()
            remaining = [n for n in notes if n.id != note_id]
            if len(remaining) == len(notes):
                return False
            self.repository.save(remaining)

        self.security_log.log_security_event(LogType.SECURE_NOTE, LogStatus.SUCCESS, "Secure note deleted")
        return True

    def get_secure_notes(self) -> List[SecureNote]:
        """All notes, content still encrypted."""
        return self.repository.load()

    def search_secure_notes(self, tag: str) -> List[SecureNote]:
        """Notes carrying tag, content still encrypted."""
        return [n for n in self.repository.load() if tag in n.tags]

    def get_secure_note(self, note_id: str) -> Optional[SecureNote]:
        """
        Fetch one note with its content decrypted.

        If the content cannot be decrypted the note is returned with
        content None and encrypted True.
        """
        note = next((n for n in self.repository.load() if n.id == note_id), None)
        if note is None:
            return None

        result = self.crypto.decrypt(note.content, self._device_key)
        if not result.ok:
            logger.warning(f"Secure note {note_id} could not be decrypted: {result.error}")
            return replace(note, content=None, encrypted=True)
        return replace(note, content=result.value, encrypted=False)
