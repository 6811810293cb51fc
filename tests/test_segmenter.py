from screenplay_ingest.text.patterns import RESERVED_TOKENS, UNKNOWN_LOCATION, UNSPECIFIED
from screenplay_ingest.text.segmenter import extract_title, page_for_line, segment_scenes

SCRIPT = "\n".join([
    "THE LONG NIGHT",
    "",
    "Written by Somebody",
    "",
    "FADE IN:",
    "",
    "A storm rolls over the hills.",
    "",
    "1. INT. KITCHEN - DAY 1",
    "Pots boil over.",
    "",
    "MARY",
    "Turn that off.",
    "",
    "JOHN (O.S.)",
    "I can't hear you!",
    "",
    "MARY",
    "Of course not.",
    "",
    "EXT. STREET NIGHT",
    "A car screeches past.",
    "",
    "CUT TO:",
    "",
    "INT. CAR",
    "JOHN:",
    "Drive.",
    "",
    "SCENE 5",
    "THE END",
    "FADE OUT.",
])


def test_two_scene_scenario():
    text = "INT. KITCHEN - DAY\nJOHN\nHello there.\n\nEXT. STREET - NIGHT\nJOHN (O.S.)\nWatch out!"
    scenes = segment_scenes(text)
    assert len(scenes) == 2
    assert (scenes[0].location, scenes[0].time_of_day, scenes[0].characters) == ("KITCHEN", "DAY", ("JOHN",))
    assert (scenes[1].location, scenes[1].time_of_day, scenes[1].characters) == ("STREET", "NIGHT", ("JOHN",))


def test_scene_count_and_order():
    scenes = segment_scenes(SCRIPT)
    assert [s.scene_number for s in scenes] == [1, 2, 3, 4, 5]
    assert [s.scene_id for s in scenes] == ["scene_1", "scene_2", "scene_3", "scene_4", "scene_5"]


def test_fade_in_opens_first_scene():
    scenes = segment_scenes(SCRIPT)
    first = scenes[0]
    assert first.heading == "FADE IN:"
    assert first.location == UNKNOWN_LOCATION
    assert first.time_of_day == UNSPECIFIED
    assert "A storm rolls over the hills." in first.content


def test_fade_out_after_first_scene_is_content():
    scenes = segment_scenes(SCRIPT)
    assert scenes[-1].content.endswith("FADE OUT.\n")


def test_title_page_lines_before_first_scene_are_ignored():
    scenes = segment_scenes(SCRIPT)
    assert all("Written by" not in s.content for s in scenes)


def test_locations_and_times():
    scenes = segment_scenes(SCRIPT)
    assert [(s.location, s.time_of_day) for s in scenes[1:]] == [
        ("KITCHEN", "DAY"),
        ("STREET", "NIGHT"),
        ("CAR", UNSPECIFIED),
        (UNKNOWN_LOCATION, UNSPECIFIED),
    ]


def test_characters_first_seen_order_without_duplicates():
    kitchen = segment_scenes(SCRIPT)[1]
    assert kitchen.characters == ("MARY", "JOHN")


def test_accented_character_names():
    text = "INT. CAFÉ - NIGHT\nJOSÉ\n¿Dónde está?\n\nZOË (O.S.)\nAquí.\n\nJOSÉ\nBien.\n"
    (scene,) = segment_scenes(text)
    assert scene.location == "CAFÉ"
    assert scene.characters == ("JOSÉ", "ZOË")


def test_structural_tokens_are_not_characters():
    scenes = segment_scenes(SCRIPT)
    assert scenes[2].characters == ()  # CUT TO: is a cue shape but reserved
    assert scenes[3].characters == ("JOHN",)
    assert scenes[4].characters == ()  # THE END, FADE OUT.
    for s in scenes:
        for name in s.characters:
            assert not name.startswith(RESERVED_TOKENS)


def test_content_keeps_heading_and_blank_lines():
    kitchen = segment_scenes(SCRIPT)[1]
    assert kitchen.content.startswith("1. INT. KITCHEN - DAY 1\nPots boil over.\n\nMARY\n")
    assert "EXT. STREET" not in kitchen.content


def test_no_headings_yields_empty_list():
    assert segment_scenes("Just some prose.\nNothing to see here.\n") == []
    assert segment_scenes("") == []


def test_transition_alone_still_opens_scene():
    scenes = segment_scenes("FADE IN\nWaves.")
    assert len(scenes) == 1
    assert scenes[0].content == "FADE IN\nWaves.\n"


def test_page_estimate():
    assert page_for_line(0) == 1
    assert page_for_line(54) == 1
    assert page_for_line(55) == 2

    filler = ["Action."] * 120
    text = "\n".join(["INT. A - DAY"] + filler + ["INT. B - NIGHT"] + filler)
    a, b = segment_scenes(text)
    assert (a.page_start, a.page_end) == (1, 3)  # lines 0..120
    assert (b.page_start, b.page_end) == (3, 5)  # lines 121..241


def test_invariants_hold():
    scenes = segment_scenes(SCRIPT)
    for i, s in enumerate(scenes, start=1):
        assert s.scene_number == i
        assert s.page_start <= s.page_end
        assert len(set(s.characters)) == len(s.characters)


def test_segmentation_is_idempotent():
    assert segment_scenes(SCRIPT) == segment_scenes(SCRIPT)


def test_extract_title():
    assert extract_title(SCRIPT) == "THE LONG NIGHT"
    assert extract_title("INT. KITCHEN - DAY\nJOHN\n") == "JOHN"
    assert extract_title("fade in\nint. kitchen") is None
