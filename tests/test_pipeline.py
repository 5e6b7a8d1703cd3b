import pytest
from fixtures import TestDataFixtures
from main import PreprocessPipeline, parse_arguments, run_command
from unittest.mock import Mock, patch


class TestPreprocessPipeline:
    """Test suite for PreprocessPipeline"""

    @pytest.fixture
    def pipeline(self, tmp_path):
        """Create pipeline instance over a temporary data directory"""
        data_dir = tmp_path / "data"
        data_dir.mkdir()
        return PreprocessPipeline(data_dir=data_dir)

    def test_check_prerequisites(self, pipeline):
        can_run, missing = pipeline.check_prerequisites()
        assert not can_run
        assert len(missing) == 2

        TestDataFixtures.create_test_data_files(pipeline.data_dir)
        can_run, missing = pipeline.check_prerequisites()
        assert can_run
        assert missing == []

    def test_get_next_runnable_steps(self, pipeline):
        steps = pipeline.get_next_runnable_steps(set())
        assert [s['name'] for s in steps] == ['tag-pp']

        steps = pipeline.get_next_runnable_steps({'tag-pp'})
        assert [s['name'] for s in steps] == ['geotag-pp']

        steps = pipeline.get_next_runnable_steps({'tag-pp', 'geotag-pp'})
        assert [s['name'] for s in steps] == ['ultimate']

    def test_run_pipeline_missing_inputs(self, pipeline):
        assert not pipeline.run_pipeline()

    def test_run_pipeline_dry_run(self, pipeline):
        pipeline.dry_run = True
        TestDataFixtures.create_test_data_files(pipeline.data_dir)

        assert pipeline.run_pipeline()
        assert not (pipeline.data_dir / "tag_pp.csv").exists()

    def test_run_pipeline(self, pipeline):
        TestDataFixtures.create_test_data_files(pipeline.data_dir)

        assert pipeline.run_pipeline()

        data_dir = pipeline.data_dir
        assert (data_dir / "tag_pp.csv").read_text().splitlines() == [
            "NO_TAG,1,10000002",
            "beach,1,10000003",
            "new york,1,10000004",
            "vacation,2,10000001,10000003",
        ]
        assert (data_dir / "tag_ultimate.csv").read_text().splitlines() == [
            "beach,10000003",
            "new york,10000004",
            "vacation,10000003,10000001",
        ]
        geotag_rows = (data_dir / "geotag_ultimate.csv").read_text().splitlines()
        assert [row.split(',')[0] for row in geotag_rows] == ["10000001", "10000003", "10000004"]

    @patch('main.GeoTagCompactor')
    def test_run_pipeline_partial_failure(self, mock_compactor_class, pipeline):
        mock_compactor = Mock()
        mock_compactor.process_geotag_file.return_value = False
        mock_compactor_class.return_value = mock_compactor
        TestDataFixtures.create_test_data_files(pipeline.data_dir)

        assert not pipeline.run_pipeline()
        assert (pipeline.data_dir / "tag_pp.csv").exists()
        assert not (pipeline.data_dir / "tag_ultimate.csv").exists()

    @patch('main.TagAggregator')
    def test_run_pipeline_resume(self, mock_aggregator_class, pipeline):
        TestDataFixtures.create_test_data_files(pipeline.data_dir)
        (pipeline.data_dir / "tag_pp.csv").write_text("NO_TAG,0,\nvacation,1,10000001\n")

        assert pipeline.run_pipeline(resume=True)
        mock_aggregator_class.assert_not_called()
        assert (pipeline.data_dir / "geotag_ultimate.csv").exists()


class TestCommands:
    """Test suite for command dispatch"""

    def test_tag_pp_command(self, tmp_path):
        tag_file = tmp_path / "tag.csv"
        tag_file.write_text("1,vacation\n2,\n3,vacation\n")
        output_file = tmp_path / "out.csv"

        args = parse_arguments(['tag-pp', str(tag_file), str(output_file)])
        assert run_command(args)
        assert output_file.read_text() == "NO_TAG,1,2\nvacation,2,1,3\n"

    def test_wrong_argument_count(self, tmp_path):
        args = parse_arguments(['geotag-pp', str(tmp_path / "tag_pp.csv")])
        assert not run_command(args)

    def test_missing_input_writes_nothing(self, tmp_path):
        output_file = tmp_path / "out.csv"
        args = parse_arguments(['tag-pp', str(tmp_path / "missing.csv"), str(output_file)])
        assert not run_command(args)
        assert not output_file.exists()

    def test_unknown_command(self, capsys):
        args = parse_arguments(['frobnicate'])
        assert not run_command(args)
        assert "Commands:" in capsys.readouterr().out

    def test_ultimate_uses_data_dir(self, tmp_path):
        (tmp_path / "tag_pp.csv").write_text("NO_TAG,0,\nvacation,1,10000001\n")
        (tmp_path / "geotag_pp.csv").write_text("10000001,0,1,2,3,4,00000000ab\n")

        args = parse_arguments(['ultimate', '--data-dir', str(tmp_path)])
        assert run_command(args)
        assert (tmp_path / "tag_ultimate.csv").read_text() == "vacation,10000001\n"
        assert (tmp_path / "geotag_ultimate.csv").read_text() == "10000001,0,1,2,3,4,00000000ab\n"

    def test_ultimate_strict_flag(self, tmp_path):
        (tmp_path / "tag_pp.csv").write_text("NO_TAG,0,\nvacation,1,10000009\n")
        (tmp_path / "geotag_pp.csv").write_text("10000001,0,1,2,3,4,00000000ab\n")

        assert run_command(parse_arguments(['ultimate', '--data-dir', str(tmp_path)]))
        assert not run_command(parse_arguments(['ultimate', '--strict', '--data-dir', str(tmp_path)]))

    def test_gen_test_requires_integer(self, tmp_path):
        TestDataFixtures.create_test_data_files(tmp_path)
        args = parse_arguments(['gen-test', str(tmp_path / "tag.csv"), str(tmp_path / "geotag.csv"), str(tmp_path / "out"), 'many'])
        assert not run_command(args)

    def test_hikaku_command(self, tmp_path, capsys):
        tag_file = tmp_path / "tag_pp.csv"
        geotag_file = tmp_path / "geotag_pp.csv"
        tag_file.write_text("NO_TAG,0,\na,3,1,2,3\n")
        geotag_file.write_text("1,0,1,2,1,1,0000000001\n2,0,1,2,1,1,0000000001\n")

        assert run_command(parse_arguments(['hikaku', str(tag_file), str(geotag_file)]))
        assert "Missing from geotag (1): [3]" in capsys.readouterr().out

    def test_hikaku_unreadable_input(self, tmp_path):
        tag_dir = tmp_path / "tag_pp.csv"
        tag_dir.mkdir()
        geotag_file = tmp_path / "geotag_pp.csv"
        geotag_file.write_text("1,0,1,2,1,1,0000000001\n")

        assert not run_command(parse_arguments(['hikaku', str(tag_dir), str(geotag_file)]))

    def test_stats_bad_row(self, tmp_path, caplog):
        geotag_file = tmp_path / "geotag_pp.csv"
        geotag_file.write_text("10000001,0,1,2,1,1,00000000ab\nnot,a,row\n")

        with caplog.at_level("ERROR"):
            assert not run_command(parse_arguments(['stats', str(geotag_file)]))
        assert "Error summarizing" in caplog.text
