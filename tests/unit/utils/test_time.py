import pendulum

from reposync.utils import humanize_ms, now_ms


class TestNowMs:
    def test_is_epoch_milliseconds(self) -> None:
        before = int(pendulum.now("UTC").timestamp() * 1000)

        value = now_ms()

        assert before <= value <= before + 60_000


class TestHumanizeMs:
    def test_renders_relative_past(self) -> None:
        three_hours_ago = now_ms() - 3 * 60 * 60 * 1000

        assert humanize_ms(three_hours_ago) == "3 hours ago"
