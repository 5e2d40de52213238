"""Self-update from GitHub releases.

Runs before the UI starts. Any failure is reported and the current version
keeps running.
"""

from __future__ import annotations

import logging
import re
import subprocess
import sys
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

REPO_OWNER = "lsherman98"
REPO_NAME = "ytrss-cli"
RELEASES_URL = f"https://api.github.com/repos/{REPO_OWNER}/{REPO_NAME}/releases/latest"


class UpdateError(RuntimeError):
    pass


@dataclass
class Release:
    version: str
    wheel_url: Optional[str] = None
    notes: str = ""


def is_dev_build(version: str) -> bool:
    v = (version or "").strip().lower()
    return not v or v == "dev" or "dev" in v


def version_key(version: str) -> Tuple[int, ...]:
    v = (version or "").strip().lstrip("vV")
    parts: List[int] = []
    for piece in v.split("."):
        m = re.match(r"\d+", piece)
        if not m:
            break
        parts.append(int(m.group(0)))
    if not parts:
        raise UpdateError(f"unrecognised version: {version!r}")
    while len(parts) > 1 and parts[-1] == 0:
        parts.pop()
    return tuple(parts)


def is_newer(candidate: str, current: str) -> bool:
    return version_key(candidate) > version_key(current)


def fetch_latest_release(session: Optional[requests.Session] = None, *, timeout: float = 10.0) -> Release:
    http = session or requests.Session()
    try:
        r = http.get(RELEASES_URL, headers={"Accept": "application/vnd.github+json"}, timeout=timeout)
        r.raise_for_status()
        data = r.json()
    except (requests.RequestException, ValueError) as exc:
        raise UpdateError(f"error checking for updates: {exc}") from exc

    if not isinstance(data, dict):
        raise UpdateError("unexpected release payload")

    tag = str(data.get("tag_name") or "").strip()
    if not tag:
        raise UpdateError("no releases found")

    wheel_url = None
    assets = data.get("assets")
    for asset in assets if isinstance(assets, list) else []:
        if not isinstance(asset, dict):
            continue
        name = str(asset.get("name") or "")
        if name.endswith(".whl"):
            wheel_url = asset.get("browser_download_url")
            break
    return Release(version=tag, wheel_url=wheel_url, notes=str(data.get("body") or ""))


def install_release(release: Release) -> None:
    if not release.wheel_url:
        raise UpdateError(f"release {release.version} has no installable package")
    cmd = [sys.executable, "-m", "pip", "install", "--quiet", "--upgrade", release.wheel_url]
    proc = subprocess.run(cmd, capture_output=True, text=True)
    if proc.returncode != 0:
        msg = (proc.stderr or proc.stdout or "").strip()
        raise UpdateError(f"update failed: {msg[-600:]}")


def check_and_update(
    current_version: str,
    *,
    session: Optional[requests.Session] = None,
    say: Callable[[str], None] = print,
    installer: Callable[[Release], None] = install_release,
) -> bool:
    """Return True when a newer version was installed and the caller should exit."""
    if is_dev_build(current_version):
        logger.info("Skipping update check for development build %s", current_version)
        return False

    try:
        release = fetch_latest_release(session)
        if not is_newer(release.version, current_version):
            logger.info("Version %s is up to date", current_version)
            return False
    except UpdateError as exc:
        logger.warning("Update check failed: %s", exc)
        return False

    if not release.wheel_url:
        logger.warning("Release %s has no wheel asset; not updating", release.version)
        return False

    say(f"🎉 New version available: {release.version} (current: {current_version})")
    say("Updating...")
    try:
        installer(release)
    except (UpdateError, OSError) as exc:
        logger.warning("Update to %s failed: %s", release.version, exc)
        say(f"⚠️  Update check failed: {exc}")
        say("Continuing with current version...")
        return False

    logger.info("Updated to %s", release.version)
    say(f"✅ Successfully updated to version {release.version}!")
    say("Please restart the application to use the new version.")
    return True
