import pytest

from medialib.rpc import MediaRpc


@pytest.fixture()
def rpc(folders, galleries):
    return MediaRpc(folders, galleries)


def _ok(resp):
    assert resp["ok"], resp
    return resp["result"]


def test_folder_contract(rpc):
    root = _ok(rpc.call("createFolder", {"name": "Root", "parent_id": None}))
    child = _ok(rpc.call("createFolder", {"name": "Child", "parent_id": root["id"]}))

    assert set(root) == {"id", "name", "parent_id", "created_at"}
    assert child["parent_id"] == root["id"]
    assert [f["id"] for f in _ok(rpc.call("listFolders"))] == [root["id"], child["id"]]
    assert _ok(rpc.call("getFolder", {"id": child["id"]}))["name"] == "Child"
    assert _ok(rpc.call("getFolder", {"id": 999})) is None
    assert [f["name"] for f in _ok(rpc.call("getFolderPath", {"id": child["id"]}))] == ["Root", "Child"]


def test_update_folder_omitted_vs_null_parent(rpc):
    root = _ok(rpc.call("createFolder", {"name": "Root"}))
    child = _ok(rpc.call("createFolder", {"name": "Child", "parent_id": root["id"]}))

    renamed = _ok(rpc.call("updateFolder", {"id": child["id"], "name": "Renamed"}))
    assert renamed["parent_id"] == root["id"]

    moved = _ok(rpc.call("updateFolder", {"id": child["id"], "parent_id": None}))
    assert moved["parent_id"] is None
    assert moved["name"] == "Renamed"


def test_error_kinds(rpc):
    a = _ok(rpc.call("createFolder", {"name": "A"}))
    b = _ok(rpc.call("createFolder", {"name": "B", "parent_id": a["id"]}))

    err = rpc.call("createFolder", {"name": "x", "parent_id": 999})["error"]
    assert err == {"kind": "not_found", "message": "folder with id 999 not found",
                   "entity": "folder", "id": 999}

    err = rpc.call("updateFolder", {"id": a["id"], "parent_id": b["id"]})["error"]
    assert err["kind"] == "invalid_parent"

    err = rpc.call("deleteFolder", {"id": a["id"]})["error"]
    assert err["kind"] == "conflict"
    assert err["reason"] == "has_subfolders"

    assert rpc.call("deleteFolder", {"id": b["id"]}) == {"ok": True, "result": None}


def test_gallery_contract(rpc, new_gallery, new_media):
    g = new_gallery()
    other = new_gallery("Other")
    x = _ok(rpc.call("addGalleryImage", {"gallery_id": g, "media_id": new_media(), "sort_order": 1}))
    y = _ok(rpc.call("addGalleryImage", {"gallery_id": g, "media_id": new_media(),
                                          "caption": "Y", "sort_order": 2}))
    foreign = _ok(rpc.call("addGalleryImage", {"gallery_id": other, "media_id": new_media(), "sort_order": 0}))
    assert x["caption"] is None

    resp = rpc.call("reorderGalleryImages", {"gallery_id": g, "entries": [
        {"id": x["id"], "sort_order": 2}, {"id": y["id"], "sort_order": 1}]})
    assert resp == {"ok": True, "result": None}
    assert [i["id"] for i in _ok(rpc.call("getGalleryImages", {"gallery_id": g}))] == [y["id"], x["id"]]

    err = rpc.call("reorderGalleryImages", {"gallery_id": g, "entries": [
        {"id": foreign["id"], "sort_order": 9}]})["error"]
    assert err["kind"] == "mismatch"
    assert err["reason"] == "wrong_gallery"

    assert _ok(rpc.call("updateGalleryImageCaption", {"id": y["id"], "caption": "new"}))["caption"] == "new"
    assert _ok(rpc.call("updateGalleryImageCaption", {"id": y["id"]}))["caption"] is None

    assert _ok(rpc.call("removeGalleryImage", {"id": x["id"]})) is None
    err = rpc.call("removeGalleryImage", {"id": x["id"]})["error"]
    assert (err["kind"], err["entity"]) == ("not_found", "gallery_image")


def test_media_contract(rpc, new_media):
    f = _ok(rpc.call("createFolder", {"name": "F"}))
    m = new_media("m.png")

    assert _ok(rpc.call("moveMedia", {"media_ids": [m], "folder_id": f["id"]})) is None
    listed = _ok(rpc.call("getFolderMedia", {"folder_id": f["id"]}))
    assert [(i["id"], i["folder_id"]) for i in listed] == [(m, f["id"])]
    assert _ok(rpc.call("getFolderMedia", {})) == []


@pytest.mark.parametrize("method,params", [
    ("createFolder", {"name": "   "}),
    ("createFolder", {}),
    ("addGalleryImage", {"gallery_id": 1, "media_id": 1}),
    ("getFolder", {"id": 1, "extra": True}),
    ("reorderGalleryImages", {"gallery_id": 1, "entries": [{"id": "x", "sort_order": 1}]}),
])
def test_invalid_requests(rpc, method, params):
    resp = rpc.call(method, params)
    assert resp["ok"] is False
    assert resp["error"]["kind"] == "invalid_request"


def test_unknown_method(rpc):
    resp = rpc.call("dropDatabase", {})
    assert resp["error"]["kind"] == "invalid_request"
    assert "createFolder" in rpc.methods
