import typing as t

from common.checks import check_object_storage_settings


def test_no_errors_when_storage_is_configured() -> None:
    assert check_object_storage_settings(None) == []


def test_missing_storage_settings_are_reported(settings: t.Any) -> None:
    settings.OBJECT_STORAGE_URL = ""
    settings.OBJECT_STORAGE_SERVICE_KEY = ""

    errors = check_object_storage_settings(None)

    assert [e.id for e in errors] == ["common.E001", "common.E001"]
    assert errors[0].msg == "OBJECT_STORAGE_URL is not set."
    assert errors[1].msg == "OBJECT_STORAGE_SERVICE_KEY is not set."
