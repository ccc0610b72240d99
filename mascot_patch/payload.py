"""Mascot overlay payload: pet catalog and loader rendering.

The loader script lives in ``resources/mascot.js`` with ``__NAME__``
placeholders. Values are substituted as JSON literals, so strings come out
quoted and escaped for JavaScript.
"""

import json
import os
from urllib.parse import quote

from .store import EDGES, PET_ENABLED, PET_TYPE, SPEECH
from .util import read_file

RESOURCES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "resources")
LOADER_TEMPLATE = os.path.join(RESOURCES_DIR, "mascot.js")

DEFAULT_PET = "akita"

# variant → (folder, idle gif, walk gif, label, description)
PETS = {
    "akita": ("dog", "akita_idle_8fps.gif", "akita_walk_8fps.gif", "Akita (Dog)", "秋田犬"),
    "totoro": ("totoro", "gray_idle_8fps.gif", "gray_walk_8fps.gif", "Totoro", "トトロ"),
    "fox": ("fox", "red_idle_8fps.gif", "red_walk_8fps.gif", "Fox", "キツネ"),
    "pika": ("pika", "pika_still.gif", "pika_run.gif", "Pika", "ピカチュウ"),
    "deno2": ("deno2", "deno2_idle_8fps.gif", "deno2_walk_8fps.gif", "Deno2", "恐竜2"),
    "clippy": ("clippy", "black_idle_8fps.gif", "brown_walk_8fps.gif", "Clippy", "クリッピー"),
    "rubber-duck": ("rubber-duck", "yellow_idle_8fps.gif", "yellow_walk_8fps.gif", "Rubber Duck", "アヒル隊長"),
    "crab": ("crab", "red_idle_8fps.gif", "red_walk_8fps.gif", "Crab", "カニ"),
    "zappy": ("zappy", "yellow_idle_8fps.gif", "yellow_walk_8fps.gif", "Zappy", "ザッピー"),
    "cockatiel": ("cockatiel", "brown_idle_8fps.gif", "brown_walk_8fps.gif", "Cockatiel", "オカメインコ"),
    "snake": ("snake", "green_idle_8fps.gif", "green_walk_8fps.gif", "Snake", "ヘビ"),
    "chicken": ("chicken", "white_idle_8fps.gif", "white_walk_8fps.gif", "Chicken", "ニワトリ"),
    "turtle": ("turtle", "green_idle_8fps.gif", "green_walk_8fps.gif", "Turtle", "カメ"),
    "panda": ("panda", "black_idle_8fps.gif", "black_walk_8fps.gif", "Panda", "パンダ"),
    "snail": ("snail", "brown_idle_8fps.gif", "brown_walk_8fps.gif", "Snail", "カタツムリ"),
    "deno": ("deno", "green_idle_8fps.gif", "green_walk_8fps.gif", "Deno", "恐竜"),
    "morph": ("morph", "purple_idle_8fps.gif", "purple_walk_8fps.gif", "Morph", "モーフ"),
}


def resource_url(path):
    """Map a local file to the scheme the workbench renderer may load from."""
    p = path.replace("\\", "/")
    if not p.startswith("/"):
        p = "/" + p
    return "vscode-file://vscode-app" + quote(p, safe="/:")


def pet_urls(variant, extension_root):
    """Return (walk_urls, idle_urls) for ``variant``."""
    folder, idle, walk = PETS.get(variant, PETS[DEFAULT_PET])[:3]
    if not extension_root:
        return [], []
    base = os.path.join(extension_root, "resources", "pet", folder)
    return [resource_url(os.path.join(base, walk))], [resource_url(os.path.join(base, idle))]


def render(template, values):
    for key, value in values.items():
        template = template.replace(f"__{key}__", json.dumps(value, ensure_ascii=False))
    return template


def load_payload(variant, enabled=True, extension_root="", edges=None, speech=None, template_path=LOADER_TEMPLATE):
    """Render the loader for ``variant``. Returns (script, resource_urls)."""
    walk_urls, idle_urls = pet_urls(variant, extension_root)
    script = render(read_file(template_path), {
        "PET_ENABLED": bool(enabled),
        "PET_WALK_URLS": walk_urls,
        "PET_IDLE_URLS": idle_urls,
        "PET_EMOTE_URLS": [],
        "EDGE_CONFIG": edges or {"top": True, "right": False, "bottom": False, "left": False},
        "SPEECH_CONFIG": speech or {"enabled": True, "fontSize": "12px"},
    })
    return script, walk_urls + idle_urls


def payload_from_store(store, extension_root=""):
    return load_payload(
        store.get(PET_TYPE),
        enabled=store.get(PET_ENABLED),
        extension_root=extension_root,
        edges=store.get(EDGES),
        speech=store.get(SPEECH),
    )
