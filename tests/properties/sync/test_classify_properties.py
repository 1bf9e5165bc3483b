from hypothesis import given, strategies as st

from reposync.adapter import StatusFile
from reposync.enums import FileStatus
from reposync.sync import split_status_files

codes = st.sampled_from([" ", "M", "A", "D", "R", "?", "U"])


@st.composite
def status_files(draw: st.DrawFn) -> list[StatusFile]:
    paths = draw(
        st.lists(
            st.text(alphabet="abcdefgh/._", min_size=1, max_size=12),
            unique=True,
            max_size=20,
        )
    )
    return [
        StatusFile(path=path, index=draw(codes), working_dir=draw(codes)) for path in paths
    ]


@given(files=status_files())
def test_path_appears_in_at_most_one_list(files: list[StatusFile]) -> None:
    split = split_status_files(files)

    staged = {e.path for e in split.staged}
    unstaged = {e.path for e in split.unstaged}
    assert not staged & unstaged
    assert len(staged) == len(split.staged)
    assert len(unstaged) == len(split.unstaged)


@given(files=status_files())
def test_partially_staged_paths_are_unstaged(files: list[StatusFile]) -> None:
    split = split_status_files(files)

    assert set(split.partially_staged) <= {e.path for e in split.unstaged}


@given(files=status_files())
def test_modified_count_counts_changed_paths(files: list[StatusFile]) -> None:
    split = split_status_files(files)

    changed = [
        f for f in files if f.working_dir != " " or f.index not in (" ", "?")
    ]
    assert split.modified_count == len(changed)


@given(files=status_files())
def test_unmerged_paths_are_conflicts(files: list[StatusFile]) -> None:
    split = split_status_files(files)

    unmerged = {f.path for f in files if f.code in {"UU", "AA", "DD", "AU", "UA", "DU", "UD"}}
    for entry in (*split.staged, *split.unstaged):
        if entry.path in unmerged:
            assert entry.status == FileStatus.CONFLICT
