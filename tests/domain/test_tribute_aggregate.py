from memorials.tribute.tribute import Tribute, initial_for


def test_initial_from_name():
    assert initial_for("ruth") == "R"
    assert initial_for("  ") == "G"
    assert initial_for(None) == "G"


def test_new_tribute_is_unapproved():
    tribute = Tribute.create(obituary_id="obit-1", name="Ruth", message="She taught me to sail.", photos=["a.jpg"])
    assert tribute.is_approved is False
    assert tribute.initial == "R"
    assert tribute.photo_list() == ["a.jpg"]
    assert tribute.video_list() == []


def test_edit_refreshes_initial():
    tribute = Tribute.create(obituary_id="obit-1", name="Ruth", message="Hello")
    tribute.edit(name="Tom", videos=["https://video.example.com/1"])
    assert tribute.initial == "T"
    assert tribute.video_list() == ["https://video.example.com/1"]


def test_approve():
    tribute = Tribute.create(obituary_id="obit-1", name="Ruth", message="Hello")
    tribute.approve()
    assert tribute.is_approved is True
