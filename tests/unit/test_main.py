"""
Tests for the command line entry point.
"""

from trailguard_prime.main import main, parse_args


class TestParseArgs:

    def test_replay_options(self):
        args = parse_args(["--replay", "prices.csv", "--order-type", "BUY", "--trailing-bps", "300"])
        assert args.replay == "prices.csv"
        assert args.order_type == "BUY"
        assert args.trailing_bps == 300
        assert not args.dry_run


class TestMain:

    def test_no_mode(self):
        assert main([]) == 2

    def test_dry_run(self, tmp_path):
        path = tmp_path / "paper.yaml"
        path.write_text(
            "mode: paper\n"
            "engine: {admin: ops}\n"
            "feeds:\n"
            "  - {feed_id: ETH/USD, decimals: 8, price: 2000.0}\n"
        )
        assert main(["--config", str(path), "--dry-run"]) == 0

    def test_dry_run_invalid(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("mode: demo\n")
        assert main(["--config", str(path), "--dry-run"]) == 1

    def test_missing_config(self, tmp_path):
        assert main(["--config", str(tmp_path / "nope.yaml"), "--dry-run"]) == 1

    def test_replay_writes_frame(self, tmp_path, crash_prices):
        prices = tmp_path / "prices.csv"
        crash_prices.rename("price").to_csv(prices, index_label="timestamp")
        output = tmp_path / "frame.csv"

        assert main(["--replay", str(prices), "--output", str(output)]) == 0
        assert output.exists()

    def test_replay_missing_column(self, tmp_path, crash_prices):
        prices = tmp_path / "prices.csv"
        crash_prices.rename("close").to_csv(prices, index_label="timestamp")

        assert main(["--replay", str(prices)]) == 1
