import pytest

from prayercompass import cli

LONDON_ARGS = ["--lat", "51.5074", "--lng", "-0.1278", "--tz", "Europe/London"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("prayercompass.config.load_dotenv", lambda: False)
    for name in (
        "PRAYER_METHOD",
        "PRAYER_ASR",
        "PRAYER_HIGH_LAT_RULE",
        "PRAYER_LATITUDE",
        "PRAYER_LONGITUDE",
        "PRAYER_ADDRESS",
        "PRAYER_TIMEZONE",
        "PRAYER_LANG",
        "PRAYER_REMINDER_MINUTES",
    ):
        monkeypatch.delenv(name, raising=False)


def test_prints_times_and_status(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main([*LONDON_ARGS, "--when", "2025-01-05 12:30"]) == 0
    out = capsys.readouterr().out
    assert "2025-01-05" in out
    assert "Dhuhr" in out
    assert "Current: Dhuhr" in out
    assert "Next prayer: Asr" in out
    assert "Qibla: 11" in out


def test_after_isha_shows_tomorrow(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main([*LONDON_ARGS, "--when", "2025-01-05 23:00"]) == 0
    assert "Fajr" in capsys.readouterr().out.split("Next prayer:")[1].split("\n")[0]


def test_notifications(capsys: pytest.CaptureFixture[str]) -> None:
    args = [*LONDON_ARGS, "--when", "2025-01-05 12:30", "--notifications"]
    assert cli.main(args) == 0
    assert "Asr in 10 minutes" in capsys.readouterr().out


def test_chart(tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
    target = tmp_path / "london.png"
    args = [*LONDON_ARGS, "--when", "2025-01-05 12:30"]
    args += ["--chart", str(target), "--days", "3"]
    assert cli.main(args) == 0
    assert target.exists()
    assert "Saved:" in capsys.readouterr().out


def test_falls_back_to_mecca(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    monkeypatch.setattr(
        "prayercompass.location._geocode_nominatim", lambda address: None
    )
    args = ["--address", "nowhere", "--tz", "Asia/Riyadh", "--when", "2025-01-05 12:30"]
    assert cli.main(args) == 0
    out = capsys.readouterr().out
    assert "Mecca" in out
    assert "Qibla: 0.00°" in out


@pytest.mark.parametrize(
    "argv",
    [
        [*LONDON_ARGS, "--when", "tomorrow"],
        ["--lat", "51.5", "--tz", "UTC"],
        ["--lat", "95", "--lng", "0", "--tz", "UTC"],
        [*LONDON_ARGS, "--method", "Atlantis"],
        ["--lat", "51.5", "--lng", "0", "--tz", "Mars/Olympus"],
    ],
)
def test_errors_exit_non_zero(
    argv: list[str], capsys: pytest.CaptureFixture[str]
) -> None:
    assert cli.main(argv) == 1
    assert capsys.readouterr().err.startswith("error:")
