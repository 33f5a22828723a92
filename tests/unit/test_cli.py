from modelprovisioner import cli


def test_main_reads_environment_and_exits_cleanly_on_interrupt(monkeypatch, tmp_path):
    monkeypatch.setenv("DEBUG", "true")
    monkeypatch.setenv("SLEEP_INTERVAL", "30")
    monkeypatch.setenv("CONFIG_PATH", str(tmp_path / "config.yaml"))
    seen = {}

    def _run_forever(self, max_cycles=None):
        seen["settings"] = self.settings
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "configure_logging", lambda verbose: seen.setdefault("verbose", verbose))
    monkeypatch.setattr(cli.CycleDriver, "run_forever", _run_forever)

    assert cli.main() == 0
    assert seen["verbose"] is True
    assert seen["settings"].sleep_interval == 30.0
    assert seen["settings"].config_path == tmp_path / "config.yaml"
