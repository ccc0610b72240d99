import json

import pytest

from mascot_patch import block, payload
from mascot_patch.store import EDGES, PET_ENABLED, PET_TYPE, SPEECH, JsonStore


def test_render_substitutes_every_placeholder():
    script, urls = payload.load_payload("fox", enabled=True, extension_root="/ext")
    assert "__PET_" not in script
    assert "__EDGE_CONFIG__" not in script and "__SPEECH_CONFIG__" not in script
    assert "const _petEnabled = true;" in script
    assert urls == [
        "vscode-file://vscode-app/ext/resources/pet/fox/red_walk_8fps.gif",
        "vscode-file://vscode-app/ext/resources/pet/fox/red_idle_8fps.gif",
    ]
    assert json.dumps(urls[:1]) in script


def test_disabled_payload():
    script, _ = payload.load_payload("akita", enabled=False)
    assert "const _petEnabled = false;" in script


def test_unknown_variant_falls_back_to_akita():
    _, urls = payload.load_payload("dragon", extension_root="/ext")
    assert urls[0].endswith("/dog/akita_walk_8fps.gif")


def test_no_extension_root_means_no_urls():
    _, urls = payload.load_payload("fox")
    assert urls == []


def test_resource_url_for_windows_path():
    url = payload.resource_url(r"C:\Users\me\.vscode\ext\pet\dog idle.gif")
    assert url == "vscode-file://vscode-app/C:/Users/me/.vscode/ext/pet/dog%20idle.gif"


def test_edge_and_speech_config_are_json():
    script, _ = payload.load_payload(
        "crab", edges={"top": False, "right": True, "bottom": False, "left": False},
        speech={"enabled": False, "fontSize": "14px"},
    )
    assert 'const _edgeConfig = {"top": false, "right": true, "bottom": false, "left": false};' in script
    assert '"fontSize": "14px"' in script


@pytest.mark.parametrize("variant", sorted(payload.PETS))
def test_every_variant_builds_a_block(variant):
    script, _ = payload.load_payload(variant, extension_root="/ext")
    built = block.build(script, "vscodeMascot", "1.0.0")
    assert block.strip(built, "vscodeMascot") == ""


def test_store_defaults(tmp_path):
    store = JsonStore(str(tmp_path / "state.json"))
    assert store.get(PET_ENABLED) is False
    assert store.get(PET_TYPE) == "akita"
    assert store.get(EDGES)["top"] is True
    assert store.get("missing", "fallback") == "fallback"


def test_store_update_persists_and_notifies(tmp_path):
    path = tmp_path / "nested" / "state.json"
    store = JsonStore(str(path))
    seen = []
    unsubscribe = store.subscribe(lambda name, value: seen.append((name, value)))

    store.update(PET_TYPE, "fox")
    store.update(PET_TYPE, "fox")

    assert seen == [(PET_TYPE, "fox")]
    assert json.loads(path.read_text(encoding="utf-8")) == {PET_TYPE: "fox"}
    assert JsonStore(str(path)).get(PET_TYPE) == "fox"

    unsubscribe()
    store.update(SPEECH, {"enabled": False, "fontSize": "12px"})
    assert len(seen) == 1


def test_store_ignores_garbage_file(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")
    assert JsonStore(str(path)).get(PET_TYPE) == "akita"


def test_payload_from_store(tmp_path):
    store = JsonStore(str(tmp_path / "state.json"))
    store.update(PET_ENABLED, True)
    store.update(PET_TYPE, "panda")
    script, urls = payload.payload_from_store(store, "/ext")
    assert "const _petEnabled = true;" in script
    assert urls[0].endswith("/panda/black_walk_8fps.gif")
