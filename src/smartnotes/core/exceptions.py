"""
Exceptions for SmartNotes
This is placed such that there is a general error catcher
"""


class SmartNotesError(Exception):
    # general container for errors
    pass


class StorageError(SmartNotesError):
    # raised if the note database fails in some way
    pass


class NoteNotFoundError(SmartNotesError):
    # raised when a note id DNE in the DB
    pass


class EncryptionError(SmartNotesError):
    # base for everything raised by the encryption core
    pass


class InvalidPasswordError(EncryptionError):
    # raised when the password is missing, empty or not text
    pass


class MalformedEnvelopeError(EncryptionError):
    # raised when a stored envelope is not base64 or too short to hold salt/nonce/tag
    pass


class AuthenticationFailureError(EncryptionError):
    # raised when the GCM tag does not verify (wrong password OR corrupted data)
    pass


class EncryptionFailedError(EncryptionError):
    # raised when the primitive itself fails while encrypting
    pass


class NoteStateError(SmartNotesError):
    # raised when an operation does not fit the note's current state
    pass


class AlreadyEncryptedError(NoteStateError):
    # raised when encrypting (or editing) a note that is already encrypted
    pass


class NotEncryptedError(NoteStateError):
    # raised when decrypting a note that is not encrypted
    pass
