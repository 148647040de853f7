"""User preferences for the chat panel.

Loads settings from ~/.chat-panel/preferences.yaml.
Falls back to sensible defaults if the file doesn't exist or is invalid.
Creates a default file on first run so users can discover and edit it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .log import logger

PREFS_PATH = Path.home() / ".chat-panel" / "preferences.yaml"

_DEFAULT_YAML = """\
# Chat Panel Preferences
# Delete this file to reset to defaults.

disclaimer:
  acknowledged: false            # set once the user dismisses the disclaimer card

tabs:
  show_welcome: true             # greet new tabs with a welcome message

request:
  customization_id: ""           # backend customization to send with prompts
  profile_id: ""                 # backend profile to send with prompts

server:
  host: "127.0.0.1"
  port: 8765
  workspace_folders: []          # folders used to compute relative file paths
"""


@dataclass
class DisclaimerPreferences:
    acknowledged: bool = False


@dataclass
class TabPreferences:
    """Settings applied to newly created tabs."""

    show_welcome: bool = True


@dataclass
class RequestPreferences:
    customization_id: str = ""
    profile_id: str = ""


@dataclass
class ServerPreferences:
    """Where the websocket bridge listens."""

    host: str = "127.0.0.1"
    port: int = 8765
    workspace_folders: list[str] = field(default_factory=list)


@dataclass
class Preferences:
    """Top-level panel preferences."""

    disclaimer: DisclaimerPreferences = field(default_factory=DisclaimerPreferences)
    tabs: TabPreferences = field(default_factory=TabPreferences)
    request: RequestPreferences = field(default_factory=RequestPreferences)
    server: ServerPreferences = field(default_factory=ServerPreferences)


def load_preferences(path: Path | None = None) -> Preferences:
    """Load preferences from YAML file.

    Falls back to sensible defaults if the file doesn't exist or is invalid.
    Creates a default preferences file on first run.
    """
    path = path or PREFS_PATH
    prefs = Preferences()

    if path.exists():
        try:
            data = yaml.safe_load(path.read_text()) or {}
            if isinstance(data.get("disclaimer"), dict):
                ddata = data["disclaimer"]
                if "acknowledged" in ddata:
                    prefs.disclaimer.acknowledged = bool(ddata["acknowledged"])
            if isinstance(data.get("tabs"), dict):
                tdata = data["tabs"]
                if "show_welcome" in tdata:
                    prefs.tabs.show_welcome = bool(tdata["show_welcome"])
            if isinstance(data.get("request"), dict):
                rdata = data["request"]
                if "customization_id" in rdata:
                    prefs.request.customization_id = str(rdata["customization_id"] or "")
                if "profile_id" in rdata:
                    prefs.request.profile_id = str(rdata["profile_id"] or "")
            if isinstance(data.get("server"), dict):
                sdata = data["server"]
                if "host" in sdata:
                    prefs.server.host = str(sdata["host"])
                if "port" in sdata:
                    prefs.server.port = int(sdata["port"])
                if isinstance(sdata.get("workspace_folders"), list):
                    prefs.server.workspace_folders = [str(f) for f in sdata["workspace_folders"]]
        except Exception:
            logger.debug("failed to parse preferences at %s", path, exc_info=True)
            prefs = Preferences()  # Fall back to defaults on any parse error
    else:
        # Create default file for user to customize
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(_DEFAULT_YAML)
        except OSError:
            logger.debug("could not write default preferences to %s", path, exc_info=True)

    return prefs


def save_disclaimer_acknowledged(acknowledged: bool = True, path: Path | None = None) -> None:
    """Persist the disclaimer acknowledgement to the preferences file.

    Surgically updates only the acknowledged value, preserving the rest of
    the file (including user comments) as-is.
    """
    path = path or PREFS_PATH
    try:
        if path.exists():
            text = path.read_text()
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            text = _DEFAULT_YAML

        value = "true" if acknowledged else "false"
        if re.search(r"^\s+acknowledged:", text, re.MULTILINE):
            text = re.sub(
                r"^(\s+acknowledged:)\s*\S+(.*)$",
                f"\\1 {value}\\2",
                text,
                count=1,
                flags=re.MULTILINE,
            )
        elif re.search(r"^disclaimer:", text, re.MULTILINE):
            # disclaimer section exists but no acknowledged key
            text = re.sub(
                r"^(disclaimer:.*)$",
                f"\\1\n  acknowledged: {value}",
                text,
                count=1,
                flags=re.MULTILINE,
            )
        else:
            # No disclaimer section at all, append it
            text = text.rstrip() + f"\n\ndisclaimer:\n  acknowledged: {value}\n"

        path.write_text(text)
    except OSError:
        logger.debug("could not persist disclaimer acknowledgement", exc_info=True)
