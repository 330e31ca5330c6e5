"""Localized user-facing messages."""

from shelf.config import settings

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "err_album_not_found": "Album not found",
        "err_entity_not_found": "Entity not found",
        "err_unauthorized": "Please log in to your account",
        "err_bad_request": "Unable to do that",
        "err_already_exists": "%s already exists",
        "err_save_failed": "Changes could not be saved",
        "err_delete_failed": "Could not be deleted",
        "err_no_items_selected": "No items selected",
        "err_zip_failed": "Failed to create zip file",
        "msg_album_created": "Album created",
        "msg_album_saved": "Album saved",
        "msg_album_deleted": "Album %s deleted",
        "msg_album_restored": "Album %s restored",
        "msg_changes_saved": "Changes successfully saved",
        "msg_album_cloned": "Album contents cloned",
        "msg_selection_added_to": "Selection added to %s",
        "msg_entry_added_to": "One entry added to %s",
        "msg_entries_added_to": "%d entries added to %s",
        "msg_entry_removed_from": "One entry removed from %s",
        "msg_entries_removed_from": "%d entries removed from %s",
    },
    "de": {
        "err_album_not_found": "Album nicht gefunden",
        "err_entity_not_found": "Eintrag nicht gefunden",
        "err_unauthorized": "Bitte melde dich an",
        "err_bad_request": "Das ist leider nicht möglich",
        "err_already_exists": "%s existiert bereits",
        "err_save_failed": "Änderungen konnten nicht gespeichert werden",
        "err_delete_failed": "Konnte nicht gelöscht werden",
        "err_no_items_selected": "Keine Einträge ausgewählt",
        "err_zip_failed": "Zip-Datei konnte nicht erstellt werden",
        "msg_album_created": "Album erstellt",
        "msg_album_saved": "Album gespeichert",
        "msg_album_deleted": "Album %s gelöscht",
        "msg_album_restored": "Album %s wiederhergestellt",
        "msg_changes_saved": "Änderungen erfolgreich gespeichert",
        "msg_album_cloned": "Albuminhalt kopiert",
        "msg_selection_added_to": "Auswahl zu %s hinzugefügt",
        "msg_entry_added_to": "Ein Eintrag zu %s hinzugefügt",
        "msg_entries_added_to": "%d Einträge zu %s hinzugefügt",
        "msg_entry_removed_from": "Ein Eintrag aus %s entfernt",
        "msg_entries_removed_from": "%d Einträge aus %s entfernt",
    },
}


def msg(key: str, *args) -> str:
    """Look up a message by key in the configured locale and interpolate args."""
    catalog = MESSAGES.get(settings.default_locale, MESSAGES["en"])
    text = catalog.get(key) or MESSAGES["en"].get(key) or key
    if args:
        try:
            return text % args
        except TypeError:
            return text
    return text


def response(code: int, key: str, *args) -> dict:
    return {"code": code, "message": msg(key, *args)}
