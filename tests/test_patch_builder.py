from __future__ import annotations

from blame_fixup.aligner import align_lines
from blame_fixup.patch_builder import build_commit_patch, build_patches
from conftest import C1, C2, NOT_COMMITTED, make_blame, patch_sides


def test_build_patches_given_unmodified_file_when_built_then_no_patch_is_produced(head_blame) -> None:
    # Given
    lines = align_lines("a.txt", head_blame, list(head_blame))

    # When
    patches = build_patches("a.txt", lines)

    # Then
    assert patches == []


def test_build_patches_given_single_line_edit_when_built_then_one_patch_targets_owner_with_full_context(
    head_blame,
) -> None:
    # Given
    working = make_blame((C1, "L1"), (NOT_COMMITTED, "L2'"), (C2, "L3"))
    lines = align_lines("a.txt", head_blame, working)

    # When
    patches = build_patches("a.txt", lines)

    # Then
    assert len(patches) == 1
    assert patches[0].target_commit == C1
    assert patches[0].diff_text == (
        "--- a/a.txt\n"
        "+++ b/a.txt\n"
        "@@ -1,3 +1,3 @@\n"
        " L1\n"
        "-L2\n"
        "+L2'\n"
        " L3\n"
    )


def test_build_patches_given_deleted_line_when_built_then_patch_removes_line_for_owner_only(head_blame) -> None:
    # Given
    working = make_blame((C1, "L1"), (C2, "L3"))
    lines = align_lines("a.txt", head_blame, working)

    # When
    patches = build_patches("a.txt", lines)

    # Then
    assert [patch.target_commit for patch in patches] == [C1]
    assert "@@ -1,3 +1,2 @@" in patches[0].diff_text
    assert "\n-L2\n" in patches[0].diff_text


def test_build_patches_given_edits_for_two_commits_when_built_then_later_patch_sees_earlier_fixup(
    head_blame,
) -> None:
    # Given
    working = make_blame((NOT_COMMITTED, "L1'"), (C1, "L2"), (NOT_COMMITTED, "L3'"))
    lines = align_lines("a.txt", head_blame, working)

    # When
    patches = build_patches("a.txt", lines)

    # Then
    assert [patch.target_commit for patch in patches] == [C1, C2]
    first_before, first_after = patch_sides(patches[0].diff_text)
    second_before, second_after = patch_sides(patches[1].diff_text)
    assert first_before == ["L1", "L2", "L3"]
    assert second_before == first_after
    assert second_after == ["L1'", "L2", "L3'"]
    assert all(line.applied for line in lines if line.changed)


def test_build_patches_given_mixed_edits_when_all_patches_replayed_then_work_tree_is_reproduced() -> None:
    # Given
    head = make_blame((C1, "a"), (C2, "b"), (C1, "c"), (C2, "d"), (C2, "e"), (C1, "f"))
    working = make_blame(
        (C1, "a"),
        (NOT_COMMITTED, "b2"),
        (NOT_COMMITTED, "c2"),
        (C2, "d"),
        (NOT_COMMITTED, "f2"),
        (NOT_COMMITTED, "g"),
    )
    lines = align_lines("src/app.py", head, working)

    # When
    patches = build_patches("src/app.py", lines)

    # Then
    state = [record.content for record in head]
    for patch in patches:
        before, after = patch_sides(patch.diff_text)
        assert before == state
        state = after
    assert state == [record.content for record in working]


def test_build_commit_patch_given_group_without_effect_when_built_then_none_is_returned(head_blame) -> None:
    # Given
    lines = align_lines("a.txt", head_blame, list(head_blame))

    # When
    patch = build_commit_patch("a.txt", lines, C1, [0])

    # Then
    assert patch is None


def test_build_patches_given_unattributed_insertion_when_built_then_new_line_is_left_out_of_every_patch(
    head_blame,
) -> None:
    # Given
    working = make_blame((C1, "L1"), (NOT_COMMITTED, "L2'"), (C2, "L3"), (NOT_COMMITTED, "brand new"))
    lines = align_lines("a.txt", head_blame, working)

    # When
    patches = build_patches("a.txt", lines)

    # Then
    assert len(patches) == 1
    assert "brand new" not in patches[0].diff_text
    _, after = patch_sides(patches[0].diff_text)
    assert after == ["L1", "L2'", "L3"]


def test_build_patches_given_file_without_final_newline_when_middle_line_edited_then_marker_follows_context(
    head_blame,
) -> None:
    # Given
    working = make_blame((C1, "L1"), (NOT_COMMITTED, "L2'"), (C2, "L3"))
    lines = align_lines("a.txt", head_blame, working)

    # When
    patches = build_patches("a.txt", lines, head_eol=False, working_eol=False)

    # Then
    assert patches[0].diff_text == (
        "--- a/a.txt\n"
        "+++ b/a.txt\n"
        "@@ -1,3 +1,3 @@\n"
        " L1\n"
        "-L2\n"
        "+L2'\n"
        " L3\n"
        "\\ No newline at end of file\n"
    )


def test_build_patches_given_last_line_edited_and_newline_added_when_built_then_only_old_side_is_marked(
    head_blame,
) -> None:
    # Given
    working = make_blame((C1, "L1"), (C1, "L2"), (NOT_COMMITTED, "L3'"))
    lines = align_lines("a.txt", head_blame, working)

    # When
    patches = build_patches("a.txt", lines, head_eol=False, working_eol=True)

    # Then
    assert [patch.target_commit for patch in patches] == [C2]
    assert patches[0].diff_text.endswith("-L3\n\\ No newline at end of file\n+L3'\n")


def test_build_patches_given_two_commits_and_no_final_newline_when_replayed_then_newline_state_carries_over(
    head_blame,
) -> None:
    # Given
    working = make_blame((NOT_COMMITTED, "L1'"), (C1, "L2"), (NOT_COMMITTED, "L3'"))
    lines = align_lines("a.txt", head_blame, working)

    # When
    patches = build_patches("a.txt", lines, head_eol=False, working_eol=False)

    # Then
    assert [patch.target_commit for patch in patches] == [C1, C2]
    assert patches[0].diff_text.endswith(" L3\n\\ No newline at end of file\n")
    assert patches[1].diff_text.endswith("-L3\n\\ No newline at end of file\n+L3'\n\\ No newline at end of file\n")
