"""Unit tests for CLI commands."""

from pathlib import Path

import numpy as np
import pytest
import yaml
from typer.testing import CliRunner

from walker.agent.network import NeuralNetwork
from walker.agent.serialization import save_network
from walker.cli.main import app
from walker.config import AgentConfig, NetworkConfig, TrainingConfig, WalkerConfig

runner = CliRunner()


@pytest.fixture
def pendulum_config(tmp_path: Path) -> Path:
    """Small configuration file sized for Pendulum-v1 (one action)."""
    config = WalkerConfig(
        agent=AgentConfig(epochs=1, batch_size=8),
        network=NetworkConfig(
            state_size=3,
            action_size=1,
            critic_architecture="Input |8| (LeakyReLU) |1| Output",
            actor_architecture="Input |8| (TanH) |1| (TanH) Output",
        ),
        training=TrainingConfig(
            episodes=2,
            max_timesteps=20,
            weights_dir=str(tmp_path / "weights"),
            data_dir=str(tmp_path / "saved"),
            seed=5,
        ),
    )
    config = config.model_copy(
        update={"logging": config.logging.model_copy(update={"log_dir": str(tmp_path / "logs")})}
    )
    path = tmp_path / "pendulum.yaml"
    config.to_yaml(str(path))
    return path


class TestMainApp:
    """Tests for the main CLI application."""

    def test_help_output(self) -> None:
        """Test that --help works."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "walker" in result.stdout.lower()

    def test_no_args_shows_help(self) -> None:
        """Test that running without arguments lists the command groups."""
        result = runner.invoke(app, [])
        assert "config" in result.stdout
        assert "network" in result.stdout
        assert "train" in result.stdout


class TestConfigCommands:
    """Tests for config subcommands."""

    def test_generate_default(self, tmp_path: Path) -> None:
        """Test generating the default configuration."""
        output = tmp_path / "walker.yaml"
        result = runner.invoke(app, ["config", "generate", str(output)])
        assert result.exit_code == 0
        assert WalkerConfig.from_yaml(str(output)) == WalkerConfig()

    def test_generate_quick(self, tmp_path: Path) -> None:
        """Test the quick preset shrinks batches and episodes."""
        output = tmp_path / "quick.yaml"
        result = runner.invoke(app, ["config", "generate", str(output), "--preset", "quick"])
        assert result.exit_code == 0
        config = WalkerConfig.from_yaml(str(output))
        assert config.agent.batch_size == 16
        assert config.training.episodes == 5

    def test_generate_unknown_preset(self, tmp_path: Path) -> None:
        """Test unknown presets fail."""
        result = runner.invoke(
            app, ["config", "generate", str(tmp_path / "x.yaml"), "--preset", "huge"]
        )
        assert result.exit_code == 1
        assert "Unknown preset" in result.stdout

    def test_generate_refuses_overwrite(self, tmp_path: Path) -> None:
        """Test an existing file is kept unless --force is given."""
        output = tmp_path / "walker.yaml"
        output.write_text("keep: me\n")

        result = runner.invoke(app, ["config", "generate", str(output)])
        assert result.exit_code == 1
        assert output.read_text() == "keep: me\n"

        result = runner.invoke(app, ["config", "generate", str(output), "--force"])
        assert result.exit_code == 0
        assert "agent" in yaml.safe_load(output.read_text())

    def test_validate_valid(self, tmp_path: Path) -> None:
        """Test a generated configuration validates."""
        output = tmp_path / "walker.yaml"
        WalkerConfig().to_yaml(str(output))
        result = runner.invoke(app, ["config", "validate", str(output), "--verbose"])
        assert result.exit_code == 0
        assert "Configuration is valid" in result.stdout
        assert "Monte Carlo" in result.stdout

    def test_validate_out_of_range(self, tmp_path: Path) -> None:
        """Test range violations are reported with their location."""
        path = tmp_path / "bad.yaml"
        path.write_text("agent:\n  clip_epsilon: 3.0\n")
        result = runner.invoke(app, ["config", "validate", str(path)])
        assert result.exit_code == 1
        assert "agent.clip_epsilon" in result.stdout

    def test_validate_bad_architecture(self, tmp_path: Path) -> None:
        """Test architecture problems are reported."""
        path = tmp_path / "bad.yaml"
        path.write_text("network:\n  critic_architecture: 'Input |4| (ReLU) |2| Output'\n")
        result = runner.invoke(app, ["config", "validate", str(path)])
        assert result.exit_code == 1
        assert "should output 1" in result.stdout

    def test_validate_empty(self, tmp_path: Path) -> None:
        """Test empty files are rejected."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        result = runner.invoke(app, ["config", "validate", str(path)])
        assert result.exit_code == 1
        assert "empty" in result.stdout

    def test_validate_not_mapping(self, tmp_path: Path) -> None:
        """Test non-mapping YAML is rejected."""
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        result = runner.invoke(app, ["config", "validate", str(path)])
        assert result.exit_code == 1
        assert "mapping" in result.stdout

    def test_validate_invalid_yaml(self, tmp_path: Path) -> None:
        """Test YAML syntax errors are reported."""
        path = tmp_path / "broken.yaml"
        path.write_text("agent: [unclosed\n")
        result = runner.invoke(app, ["config", "validate", str(path)])
        assert result.exit_code == 1
        assert "Invalid YAML" in result.stdout

    def test_validate_warns_on_unfillable_batch(self, tmp_path: Path) -> None:
        """Test a batch larger than an episode produces a warning."""
        path = tmp_path / "warn.yaml"
        path.write_text("agent:\n  batch_size: 500\ntraining:\n  max_timesteps: 100\n")
        result = runner.invoke(app, ["config", "validate", str(path)])
        assert result.exit_code == 0
        assert "Warning" in result.stdout

    def test_show_json(self, tmp_path: Path) -> None:
        """Test show renders the filled-in configuration."""
        path = tmp_path / "walker.yaml"
        path.write_text("agent:\n  gamma: 0.5\n")
        result = runner.invoke(app, ["config", "show", str(path), "--format", "json"])
        assert result.exit_code == 0
        assert "gamma" in result.stdout
        assert "critic_architecture" in result.stdout


class TestNetworkCommands:
    """Tests for network subcommands."""

    def test_validate_critic(self) -> None:
        """Test a valid critic descriptor passes."""
        result = runner.invoke(app, ["network", "validate", "Input |64| (LeakyReLU) |1| Output"])
        assert result.exit_code == 0
        assert "Valid critic architecture" in result.stdout

    def test_validate_actor_width(self) -> None:
        """Test actor descriptors are checked against --action-size."""
        descriptor = "Input |16| (TanH) |2| Output"
        result = runner.invoke(
            app, ["network", "validate", descriptor, "--role", "actor", "-a", "2"]
        )
        assert result.exit_code == 0

        result = runner.invoke(app, ["network", "validate", descriptor, "--role", "actor"])
        assert result.exit_code == 1
        assert "Invalid actor architecture" in result.stdout

    def test_validate_syntax_error(self) -> None:
        """Test malformed descriptors fail."""
        result = runner.invoke(app, ["network", "validate", "Input (ReLU) Output"])
        assert result.exit_code == 1

    def test_validate_unknown_role(self) -> None:
        """Test unknown roles fail."""
        result = runner.invoke(
            app, ["network", "validate", "Input |1| Output", "--role", "judge"]
        )
        assert result.exit_code == 1
        assert "Unknown role" in result.stdout

    def test_inspect(self, tmp_path: Path) -> None:
        """Test inspecting a saved weight file reports its sizes."""
        network = NeuralNetwork.from_architecture(
            "Input |5| (ReLU) |2| Output", 3, rng=np.random.default_rng(0)
        )
        path = save_network(network, tmp_path / "actor.txt")

        result = runner.invoke(app, ["network", "inspect", str(path)])
        assert result.exit_code == 0
        assert "Input size: 3" in result.stdout
        assert "Output size: 2" in result.stdout

    def test_inspect_malformed(self, tmp_path: Path) -> None:
        """Test malformed weight files fail."""
        path = tmp_path / "broken.txt"
        path.write_text("Input |5| (ReLU) |2| Output\n0.1 0.2\n")
        result = runner.invoke(app, ["network", "inspect", str(path)])
        assert result.exit_code == 1
        assert "Cannot read weight file" in result.stdout


class TestTrainCommands:
    """Tests for train subcommands."""

    def test_train_help(self) -> None:
        """Test train run --help lists the options."""
        result = runner.invoke(app, ["train", "run", "--help"])
        assert result.exit_code == 0
        assert "--env" in result.stdout

    @pytest.mark.slow
    def test_train_pendulum(self, pendulum_config: Path, tmp_path: Path) -> None:
        """Test a short run writes weights and reward history."""
        result = runner.invoke(
            app, ["train", "run", "--env", "Pendulum-v1", "--config", str(pendulum_config)]
        )
        assert result.exit_code == 0, result.stdout
        assert "Trained 2 episodes" in result.stdout
        assert (tmp_path / "weights" / "critic.txt").exists()
        assert (tmp_path / "weights" / "actor.txt").exists()
        assert (tmp_path / "saved" / "rewards.txt").exists()
        assert (tmp_path / "logs" / "metrics.jsonl").exists()

    def test_train_action_size_mismatch(self, tmp_path: Path) -> None:
        """Test the default four-action configuration is rejected for Pendulum."""
        result = runner.invoke(app, ["train", "run", "--env", "Pendulum-v1"])
        assert result.exit_code == 1
        assert "action size" in result.stdout

    def test_train_unknown_environment(self) -> None:
        """Test unknown environment ids fail cleanly."""
        result = runner.invoke(app, ["train", "run", "--env", "NoSuchEnv-v0"])
        assert result.exit_code == 1
        assert "Cannot create environment" in result.stdout

    def test_train_load_missing_weights(self, pendulum_config: Path) -> None:
        """Test --load without saved weights fails."""
        result = runner.invoke(
            app,
            ["train", "run", "--env", "Pendulum-v1", "--config", str(pendulum_config), "--load"],
        )
        assert result.exit_code == 1
