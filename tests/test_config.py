"""Tests for configuration loading."""

import pytest

from mdpair.config import EvaluationConfig, load_config
from mdpair.system import Box


class TestEvaluationConfig:
    """Test validation and defaults."""

    def test_default_n_bins_covers_cutoff(self):
        """Test the default histogram holds every distance below the cutoff."""
        config = EvaluationConfig(box_length=10.0, cutoff=2.5, bin_width=0.5)

        assert config.n_bins == 6
        assert config.root == 0
        assert config.backend == "serial"
        assert config.check_partition

    def test_box(self):
        """Test the box property."""
        config = EvaluationConfig(box_length=7.0, cutoff=2.5, bin_width=0.1)

        assert config.box == Box.cubic(7.0)

    @pytest.mark.parametrize(
        "kwargs, match",
        [
            ({"box_length": 0.0}, "box_length"),
            ({"cutoff": -1.0}, "cutoff"),
            ({"bin_width": 0.0}, "bin_width"),
            ({"n_bins": 0}, "n_bins"),
            ({"root": -1}, "root"),
            ({"backend": "ray"}, "backend"),
        ],
    )
    def test_invalid_values(self, kwargs, match):
        """Test each invalid field is named in the error."""
        args = {"box_length": 10.0, "cutoff": 2.5, "bin_width": 0.1}
        args.update(kwargs)

        with pytest.raises(ValueError, match=match):
            EvaluationConfig(**args)


class TestLoadConfig:
    """Test YAML loading."""

    def test_full_file(self, tmp_path):
        """Test every section is read."""
        path = tmp_path / "eval.yaml"
        path.write_text(
            "system:\n"
            "  box_length: 8.0\n"
            "potential:\n"
            "  cutoff: 2.5\n"
            "rdf:\n"
            "  bin_width: 0.05\n"
            "  n_bins: 60\n"
            "parallel:\n"
            "  backend: SERIAL\n"
            "  root: 0\n"
            "  check_partition: false\n"
            "run:\n"
            "  n_steps: 100\n"
        )

        config = load_config(str(path))

        assert config.box_length == 8.0
        assert config.cutoff == 2.5
        assert config.bin_width == 0.05
        assert config.n_bins == 60
        assert config.backend == "serial"
        assert not config.check_partition
        assert config.extra == {"run": {"n_steps": 100}}

    def test_minimal_file(self, tmp_path):
        """Test optional sections fall back to defaults."""
        path = tmp_path / "eval.yaml"
        path.write_text(
            "system: {box_length: 10}\npotential: {cutoff: 3}\nrdf: {bin_width: 0.5}\n"
        )

        config = load_config(str(path))

        assert config.n_bins == 7
        assert config.root == 0

    @pytest.mark.parametrize("missing", ["system", "potential", "rdf"])
    def test_missing_required_key(self, tmp_path, missing):
        """Test a missing required section is reported."""
        sections = {
            "system": "system: {box_length: 10}\n",
            "potential": "potential: {cutoff: 2.5}\n",
            "rdf": "rdf: {bin_width: 0.1}\n",
        }
        del sections[missing]
        path = tmp_path / "eval.yaml"
        path.write_text("".join(sections.values()))

        with pytest.raises(ValueError, match=missing):
            load_config(str(path))

    def test_empty_section(self, tmp_path):
        """Test a section with no value is reported as missing its keys."""
        path = tmp_path / "eval.yaml"
        path.write_text("system:\npotential: {cutoff: 2.5}\nrdf: {bin_width: 0.1}\n")

        with pytest.raises(ValueError, match="system.box_length"):
            load_config(str(path))

    def test_section_not_a_mapping(self, tmp_path):
        """Test a scalar section is rejected."""
        path = tmp_path / "eval.yaml"
        path.write_text(
            "system: {box_length: 10}\npotential: 2.5\nrdf: {bin_width: 0.1}\n"
        )

        with pytest.raises(ValueError, match="potential must be a mapping"):
            load_config(str(path))

    def test_not_a_mapping(self, tmp_path):
        """Test a YAML list is rejected."""
        path = tmp_path / "eval.yaml"
        path.write_text("- 1\n- 2\n")

        with pytest.raises(ValueError, match="mapping"):
            load_config(str(path))
