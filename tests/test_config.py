import unittest
from pathlib import Path

from nft_owners.classifier import DEFAULT_ABSENCE_SIGNATURES
from nft_owners.config import JobConfig
from nft_owners.errors import ConfigError, SetupError
from nft_owners.execution import SinkMode


class TestJobConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        cfg = JobConfig.from_env({})

        self.assertEqual(cfg.rpc_url, "https://evm.astar.network")
        self.assertEqual((cfg.start_token_id, cfg.end_token_id), (1, 1000))
        self.assertEqual(cfg.batch_size, 5)
        self.assertEqual(cfg.pacing_delay, 1.5)
        self.assertEqual(cfg.max_attempts, 11)
        self.assertEqual(cfg.absence_signatures, DEFAULT_ABSENCE_SIGNATURES)
        self.assertEqual(cfg.output_path, Path("nft_holders.csv"))
        self.assertIs(cfg.sink_mode, SinkMode.BUFFERED)
        self.assertTrue(cfg.output_unresolved)
        self.assertEqual(cfg.token_count, 1000)

    def test_env_overrides(self) -> None:
        cfg = JobConfig.from_env({
            "RPC_URL": "http://localhost:8545",
            "START_TOKEN_ID": "0",
            "END_TOKEN_ID": "9",
            "BATCH_SIZE": "10",
            "PACING_DELAY": "0",
            "MAX_ATTEMPTS": "3",
            "RETRY_BASE_DELAY": "0.5",
            "ABSENCE_SIGNATURES": "token does not exist, ERC721NonexistentToken",
            "SINK_MODE": "Incremental",
            "OUTPUT_UNRESOLVED": "no",
            "RUN_ID": "abc",
        })

        self.assertEqual(cfg.rpc_url, "http://localhost:8545")
        self.assertEqual(cfg.token_count, 10)
        self.assertEqual(cfg.absence_signatures, ("token does not exist", "ERC721NonexistentToken"))
        self.assertIs(cfg.sink_mode, SinkMode.INCREMENTAL)
        self.assertFalse(cfg.output_unresolved)
        self.assertEqual(cfg.run_id, "abc")

        policy = cfg.retry_policy()
        self.assertEqual(policy.max_attempts, 3)
        self.assertEqual(policy.next_delay(1), 0.5)

    def test_legacy_rpc_env_name(self) -> None:
        cfg = JobConfig.from_env({"RPC_URL_ASTAR": "https://astar.example"})
        self.assertEqual(cfg.rpc_url, "https://astar.example")

    def test_invalid_values_raise_config_error(self) -> None:
        cases = [
            {"BATCH_SIZE": "five"},
            {"BATCH_SIZE": "0"},
            {"START_TOKEN_ID": "-1"},
            {"START_TOKEN_ID": "5", "END_TOKEN_ID": "4"},
            {"PACING_DELAY": "-1"},
            {"SINK_MODE": "streaming"},
            {"OUTPUT_UNRESOLVED": "maybe"},
            {"MAX_ATTEMPTS": "0"},
            {"RETRY_BASE_DELAY": "10", "RETRY_MAX_DELAY": "1"},
            {"RPC_CALL_TIMEOUT": "0"},
        ]
        for env in cases:
            with self.subTest(env=env):
                with self.assertRaises(ConfigError):
                    JobConfig.from_env(env)

    def test_config_error_is_setup_error(self) -> None:
        self.assertTrue(issubclass(ConfigError, SetupError))


if __name__ == "__main__":
    unittest.main()
