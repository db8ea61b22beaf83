from textwrap import dedent

import pytest

from scenescript.domain.assets import AssetHandle
from scenescript.domain.commands import NARRATOR, DialogueCommand, LabelCommand, UnrecognizedCommand
from scenescript.domain.program import Program
from scenescript.language.parser import parse
from scenescript.services import END_TEXT, ExecutionEngine, run
from tests.helpers.recorders import RecordingNotifier, RecordingRenderer


def _start(script: str, **engine_kwargs):
    notifier = RecordingNotifier()
    renderer = RecordingRenderer()
    program = parse(dedent(script), notifier)
    engine = ExecutionEngine(
        engine_kwargs.pop("asset_resolver", None),
        renderer,
        notifier,
        **engine_kwargs,
    )
    engine.load_and_run(program)
    return engine, renderer, notifier


@pytest.mark.parametrize("points, expected", [(6, "High score"), (4, "Done")])
def test_conditional_block_follows_variable(points: int, expected: str) -> None:
    engine, renderer, _ = _start(
        """
        label start:
            $ points = start_points
            if points > 5:
                "High score"
            "Done"
        """,
        initial_variables={"start_points": points},
    )

    assert renderer.dialogue_texts() == [expected]
    assert engine.status == "suspended_dialogue"


def test_two_dialogues_need_one_continue_each() -> None:
    engine, renderer, _ = _start(
        """
        label start:
            "First"
            "Second"
        """
    )

    assert renderer.dialogue_texts() == ["First"]

    engine.continue_dialogue()

    assert renderer.dialogue_texts() == ["First", "Second"]
    assert engine.status == "suspended_dialogue"

    engine.continue_dialogue()

    assert engine.status == "halted"
    assert renderer.of_kind("halted") == [("halted", END_TEXT)]
    assert len(renderer.of_kind("dialogue")) == 2


def test_looping_script_pauses_every_iteration() -> None:
    notifier = RecordingNotifier()
    renderer = RecordingRenderer()
    program = parse('label start:\n  "Hi"\n  jump start\n', notifier)
    engine = run(program, renderer=renderer, notifier=notifier)

    for _ in range(10):
        assert engine.status == "suspended_dialogue"
        engine.continue_dialogue()

    assert renderer.dialogue_texts() == ["Hi"] * 11
    assert notifier.messages == []


def test_loop_without_pause_is_stopped() -> None:
    engine, renderer, notifier = _start(
        """
        label start:
            jump start
        """,
        max_steps=50,
    )

    assert engine.status == "halted"
    assert len(notifier.matching("RunawayLoop")) == 1
    assert renderer.of_kind("halted") == [("halted", END_TEXT)]


def test_broken_jump_is_reported_and_skipped() -> None:
    engine, renderer, notifier = _start(
        """
        label start:
            jump nowhere
            "After"
        """
    )

    assert renderer.dialogue_texts() == ["After"]
    messages = notifier.matching("BrokenJump")
    assert len(messages) == 1
    assert "nowhere" in messages[0][0]
    assert messages[0][1] == "warning"


def test_missing_entry_label_leaves_engine_idle() -> None:
    engine, renderer, notifier = _start(
        """
        label other:
            "Unreachable"
        """
    )

    assert engine.status == "idle"
    assert engine.state is None
    assert renderer.calls == []
    assert [severity for _, severity in notifier.matching("MissingEntryLabel")] == ["error"]


def test_custom_entry_label() -> None:
    engine, renderer, _ = _start(
        """
        label start:
            "From start"
        label chapter_two:
            "From chapter two"
        """,
        entry_label="chapter_two",
    )

    assert engine.entry_label == "chapter_two"
    assert renderer.dialogue_texts() == ["From chapter two"]


_BRANCHING = """
label start:
    menu:
        "Left":
            jump left
        "Right":
            jump right
label left:
    "Went left"
label right:
    "Went right"
"""


def test_menu_suspends_and_choice_jumps() -> None:
    engine, renderer, notifier = _start(_BRANCHING)

    assert engine.status == "suspended_menu"
    assert renderer.of_kind("menu") == [("menu", ["Left", "Right"])]
    assert engine.current_choices() == ["Left", "Right"]

    engine.select_choice(1)

    assert renderer.dialogue_texts() == ["Went right"]
    assert engine.current_choices() == []
    assert notifier.messages == []


def test_out_of_range_choice_keeps_menu_open() -> None:
    engine, renderer, notifier = _start(_BRANCHING)

    engine.select_choice(5)

    assert engine.status == "suspended_menu"
    assert engine.current_choices() == ["Left", "Right"]
    assert renderer.dialogue_texts() == []
    assert len(notifier.matching("out of range")) == 1

    engine.select_choice(0)

    assert renderer.dialogue_texts() == ["Went left"]


def test_choice_without_jump_runs_actions_then_continues_after_menu() -> None:
    engine, renderer, notifier = _start(
        """
        label start:
            menu:
                "Stay":
                    "You stay."
            "After menu"
        """
    )

    engine.select_choice(0)

    assert len(notifier.matching("BrokenChoice")) == 1
    assert renderer.dialogue_texts() == ["You stay."]

    engine.continue_dialogue()

    assert renderer.dialogue_texts() == ["You stay.", "After menu"]


def test_empty_menu_is_reported_and_skipped() -> None:
    engine, renderer, notifier = _start(
        """
        label start:
            menu:
            "after"
        """
    )

    assert len(notifier.matching("BrokenMenu")) == 1
    assert renderer.of_kind("menu") == []
    assert renderer.dialogue_texts() == ["after"]


def test_suspension_inside_conditional_resumes_in_block() -> None:
    engine, renderer, _ = _start(
        """
        label start:
            if True:
                "one"
                "two"
            "three"
        """
    )

    engine.continue_dialogue()
    engine.continue_dialogue()

    assert renderer.dialogue_texts() == ["one", "two", "three"]

    engine.continue_dialogue()

    assert engine.status == "halted"


def test_nested_conditional_inside_choice_resumes_correctly() -> None:
    engine, renderer, _ = _start(
        """
        label start:
            $ gold = 12
            menu:
                "Shop":
                    if gold >= 10:
                        "You can afford it."
                    "You leave the shop."
                    jump ending
        label ending:
            "Bye"
        """
    )

    engine.select_choice(0)
    engine.continue_dialogue()
    engine.continue_dialogue()

    assert renderer.dialogue_texts() == ["You can afford it.", "You leave the shop.", "Bye"]
    assert engine.state.depth == 0


def test_resume_signal_from_callback_is_not_reentrant() -> None:
    class AutoAdvance(RecordingRenderer):
        engine: ExecutionEngine | None = None

        def on_dialogue(self, speaker_name, color, text) -> None:
            super().on_dialogue(speaker_name, color, text)
            self.engine.continue_dialogue()

    renderer = AutoAdvance()
    engine = ExecutionEngine(renderer=renderer, notifier=RecordingNotifier())
    renderer.engine = engine

    engine.load_and_run(parse('label start:\n    "a"\n    "b"\n    "c"\n'))

    assert renderer.dialogue_texts() == ["a", "b", "c"]
    assert engine.status == "halted"
    assert len(renderer.of_kind("halted")) == 1


def test_stop_clears_and_ignores_later_signals() -> None:
    engine, renderer, _ = _start(
        """
        label start:
            "First"
            "Second"
        """
    )

    engine.stop()
    engine.continue_dialogue()

    assert engine.status == "halted"
    assert renderer.of_kind("cleared") == [("cleared",)]
    assert renderer.dialogue_texts() == ["First"]


def test_reset_to_entry_restarts_with_fresh_variables() -> None:
    engine, renderer, _ = _start(
        """
        label start:
            $ visits += 1
            "Visit [visits]"
            "Later"
        """,
        initial_variables={"visits": 0},
    )
    engine.continue_dialogue()

    engine.reset_to_entry()

    assert renderer.dialogue_texts() == ["Visit 1", "Later", "Visit 1"]
    assert engine.state.variables == {"visits": 1}


def test_reset_is_ignored_once_halted() -> None:
    engine, renderer, _ = _start('label start:\n    "Only"\n')
    engine.continue_dialogue()

    engine.reset_to_entry()

    assert engine.status == "halted"
    assert renderer.dialogue_texts() == ["Only"]


def test_speaker_names_and_interpolation() -> None:
    _, renderer, _ = _start(
        """
        define e = Character("Eileen", color="#c8ffc8")
        label start:
            $ visits = 2
            e "Visited [visits] times, [unknown]"
        """
    )

    assert renderer.of_kind("dialogue") == [
        ("dialogue", "Eileen", "#c8ffc8", "Visited 2 times, [unknown]"),
    ]


def test_unknown_speaker_and_narrator() -> None:
    engine, renderer, _ = _start(
        """
        label start:
            n "Who?"
            "Narration"
        """
    )
    engine.continue_dialogue()

    assert renderer.of_kind("dialogue") == [
        ("dialogue", "n", None, "Who?"),
        ("dialogue", "", None, "Narration"),
    ]


def test_scene_show_and_hide_by_tag() -> None:
    engine, renderer, _ = _start(
        """
        label start:
            scene bg room with fade
            show eileen happy at left
            show eileen sad
            hide eileen
            "x"
        """
    )

    assert [call for call in renderer.calls if call[0] in ("scene", "show", "hide")] == [
        ("scene", "bg room", None, "fade"),
        ("show", "eileen happy", None, "left"),
        ("hide", "eileen happy"),
        ("show", "eileen sad", None, "center"),
        ("hide", "eileen sad"),
    ]
    assert engine.state.active_scene == "bg room"
    assert engine.state.visible_actors == {}


def test_scene_change_clears_visible_actors() -> None:
    engine, _, _ = _start(
        """
        label start:
            show eileen happy
            show lucy mad
            scene bg park
            "x"
        """
    )

    assert engine.state.visible_actors == {}
    assert engine.state.active_scene == "bg park"


def test_asset_lookup_results_reach_renderer() -> None:
    handle = AssetHandle(name="bg room", type="images", path="/tmp/room.png")

    def resolver(ref: str, asset_type: str) -> AssetHandle | None:
        return handle if (ref, asset_type) == ("bg room", "images") else None

    _, renderer, _ = _start('label start:\n    scene bg room\n    "x"\n', asset_resolver=resolver)

    assert renderer.of_kind("scene") == [("scene", "bg room", handle, None)]


def test_failing_asset_lookup_is_reported() -> None:
    def resolver(ref: str, asset_type: str) -> AssetHandle | None:
        raise OSError("disk gone")

    _, renderer, notifier = _start('label start:\n    scene bg room\n    "x"\n', asset_resolver=resolver)

    assert renderer.of_kind("scene") == [("scene", "bg room", None, None)]
    assert len(notifier.matching("AssetLookup")) == 1
    assert renderer.dialogue_texts() == ["x"]


def test_media_channels() -> None:
    engine, renderer, _ = _start(
        """
        label start:
            play music "theme.ogg"
            "Listen"
            stop music
            "Quiet"
        """
    )

    assert engine.state.channels == {"music": "theme.ogg"}

    engine.continue_dialogue()

    assert renderer.of_kind("media") == [
        ("media", "play", "music", "theme.ogg"),
        ("media", "stop", "music", None),
    ]
    assert engine.state.channels == {}


def test_bad_expressions_are_reported_as_errors() -> None:
    engine, renderer, notifier = _start(
        """
        label start:
            $ total = 1 +
            if missing > 1:
                "Taken"
            "Done"
        """
    )

    errors = notifier.matching("EvaluationError")
    assert len(errors) == 2
    assert all(severity == "error" for _, severity in errors)
    assert renderer.dialogue_texts() == ["Done"]
    assert "total" not in engine.state.variables


def test_variable_changes_are_published() -> None:
    _, renderer, _ = _start(
        """
        label start:
            $ points += 5
            "x"
        """,
        initial_variables={"points": 1},
    )

    assert renderer.of_kind("variables") == [
        ("variables", {"points": 1}),
        ("variables", {"points": 6}),
    ]


def test_return_halts_run() -> None:
    engine, renderer, _ = _start(
        """
        label start:
            return
            "Never"
        """
    )

    assert engine.status == "halted"
    assert renderer.dialogue_texts() == []
    assert renderer.of_kind("halted") == [("halted", END_TEXT)]


def test_unrecognized_command_is_skipped() -> None:
    notifier = RecordingNotifier()
    renderer = RecordingRenderer()
    program = Program(
        commands=[
            LabelCommand(name="start"),
            UnrecognizedCommand(raw_text="zap", line_number=2),
            DialogueCommand(speaker=NARRATOR, text="ok"),
        ],
        labels={"start": 0},
    )

    engine = run(program, renderer=renderer, notifier=notifier)

    assert renderer.dialogue_texts() == ["ok"]
    assert len(notifier.matching("UnsupportedCommand")) == 1
    assert engine.status == "suspended_dialogue"


def test_signals_are_ignored_while_idle() -> None:
    renderer = RecordingRenderer()
    engine = ExecutionEngine(renderer=renderer, notifier=RecordingNotifier())

    engine.continue_dialogue()
    engine.select_choice(0)
    engine.reset_to_entry()

    assert engine.status == "idle"
    assert renderer.calls == []


def test_media_lookup_asks_for_audio() -> None:
    requests = []

    def resolver(ref: str, asset_type: str) -> AssetHandle | None:
        requests.append((ref, asset_type))
        return None

    _start(
        """
        label start:
            scene bg sea
            show eileen happy
            play music "calm sea.ogg"
            "x"
        """,
        asset_resolver=resolver,
    )

    assert requests == [("bg sea", "images"), ("eileen happy", "images"), ("calm sea.ogg", "audio")]


def test_huge_arithmetic_is_reported_not_raised() -> None:
    script = 'label start:\n    $ x = 1' + "0" * 400 + ' / 3\n    "after"\n'
    notifier = RecordingNotifier()
    renderer = RecordingRenderer()

    engine = run(parse(script, notifier), renderer=renderer, notifier=notifier)

    assert renderer.dialogue_texts() == ["after"]
    assert len(notifier.matching("EvaluationError")) == 1
    assert "x" not in engine.state.variables


def test_deeply_nested_condition_is_reported_not_raised() -> None:
    condition = "(" * 300 + "1" + ")" * 300
    script = f'label start:\n    if {condition} > 0:\n        "inside"\n    "after"\n'
    notifier = RecordingNotifier()
    renderer = RecordingRenderer()

    run(parse(script, notifier), renderer=renderer, notifier=notifier)

    assert renderer.dialogue_texts() == ["after"]
    assert [severity for _, severity in notifier.matching("EvaluationError")] == ["error"]


def test_long_negation_chain_is_reported_not_raised() -> None:
    script = 'label start:\n    if ' + "not " * 400 + 'flag:\n        "inside"\n    "after"\n'
    notifier = RecordingNotifier()
    renderer = RecordingRenderer()

    run(parse(script, notifier), renderer=renderer, notifier=notifier, initial_variables={"flag": True})

    assert renderer.dialogue_texts() == ["after"]
    assert len(notifier.matching("EvaluationError")) == 1


def test_jump_nested_in_choice_condition_is_not_broken() -> None:
    engine, renderer, notifier = _start(
        """
        label start:
            $ gold = 3
            menu:
                "Buy":
                    if gold >= 10:
                        jump bought
                    "Not enough gold."
        label bought:
            "Thanks!"
        """
    )

    engine.select_choice(0)

    assert notifier.matching("BrokenChoice") == []
    assert renderer.dialogue_texts() == ["Not enough gold."]


def test_long_runs_are_not_cut_off_by_default() -> None:
    engine, renderer, notifier = _start(
        """
        label start:
            $ n = 0
        label again:
            $ n += 1
            if n < 40000:
                jump again
            "Counted to [n]"
        """
    )

    assert renderer.dialogue_texts() == ["Counted to 40000"]
    assert notifier.matching("RunawayLoop") == []
    assert engine.status == "suspended_dialogue"
