from __future__ import annotations

from typing import Optional

import requests

from .config import MAX_UPLOAD_RETRIES, UPLOAD_ENDPOINT
from .contracts import SkinDatabase, SkinInfo, UploadForm, UploadTarget


def build_form(info: SkinInfo, database: SkinDatabase, hd: bool) -> UploadForm:
    return UploadForm(
        creator=info.author,
        skin_license=info.license,
        skin_type=database,
        skinisuhd=hd,
    )


def _upload_url(database_url: str) -> str:
    return f"{database_url.rstrip('/')}/{UPLOAD_ENDPOINT}"


def _upload_once(png: bytes, skin_name: str, form: UploadForm, target: UploadTarget) -> None:
    files = {"image": (f"{skin_name}.png", png, "image/png")}
    resp = requests.post(
        _upload_url(target.database_url),
        data=form.as_fields(),
        files=files,
        auth=(target.username, target.password),
        timeout=target.timeout_s,
    )
    resp.raise_for_status()


def upload_skin(png: bytes, skin_name: str, form: UploadForm, target: UploadTarget) -> None:
    """
    POST one encoded skin to the skin database.

    Retries up to MAX_UPLOAD_RETRIES, but only when the connection itself failed.
    HTTP errors and timeouts are not retried since the server may already have
    stored the skin.
    """
    last_err: Optional[Exception] = None
    for _ in range(MAX_UPLOAD_RETRIES + 1):
        try:
            _upload_once(png, skin_name, form, target)
            return
        except requests.exceptions.ConnectTimeout as e:
            last_err = e
            continue
        except requests.exceptions.Timeout as e:
            raise RuntimeError(f"Upload of {skin_name} timed out: {e}") from e
        except requests.exceptions.ConnectionError as e:
            last_err = e
            continue
        except requests.exceptions.RequestException as e:
            raise RuntimeError(f"Upload of {skin_name} failed: {e}") from e
    raise RuntimeError(f"Upload of {skin_name} failed after retries: {last_err}")
