"""
Integration tests for the fitness-connect command line.

HTTP traffic to Withings and Strava is mocked with responses; config files
live in a temporary directory.
"""
import json
import os
import pytest
import responses
from unittest.mock import patch
from freezegun import freeze_time

import main
from config import reset_config

WITHINGS_TOKEN_URL = "https://wbsapi.withings.net/v2/oauth2"
WITHINGS_MEASURE_URL = "https://wbsapi.withings.net/measure"
STRAVA_TOKEN_URL = "https://www.strava.com/oauth/token"
STRAVA_ATHLETE_URL = "https://www.strava.com/api/v3/athlete"


class TestCLI:
    """End-to-end runs of main() against mocked APIs."""

    @pytest.fixture
    def config_dir(self, tmp_path):
        strava_config = tmp_path / "config.json"
        withings_config = tmp_path / "withings_config.json"
        strava_config.write_text(json.dumps({'refresh_token': 'strava_refresh'}))
        withings_config.write_text(json.dumps({'refresh_token': 'withings_refresh'}))
        return tmp_path

    @pytest.fixture
    def env(self, config_dir):
        env_vars = {
            'STRAVA_CLIENT_ID': 'strava_id',
            'STRAVA_CLIENT_SECRET': 'strava_secret',
            'STRAVA_CONFIG_FILE': str(config_dir / "config.json"),
            'WITHINGS_CLIENT_ID': 'withings_id',
            'WITHINGS_CLIENT_SECRET': 'withings_secret',
            'WITHINGS_CONFIG_FILE': str(config_dir / "withings_config.json"),
            'LOG_LEVEL': 'WARNING',
        }
        reset_config()
        with patch.dict(os.environ, env_vars, clear=True):
            yield env_vars
        reset_config()

    def add_withings_responses(self, grams=72500):
        responses.add(responses.POST, WITHINGS_TOKEN_URL, json={
            'status': 0,
            'body': {'access_token': 'w_access', 'refresh_token': 'w_refresh', 'expires_in': 10800},
        })
        responses.add(responses.GET, WITHINGS_MEASURE_URL, json={
            'status': 0,
            'body': {'measuregrps': [
                {'grpid': 1, 'date': 1710500000, 'measures': [{'value': grams, 'type': 1, 'unit': -3}]},
            ]},
        })

    def add_strava_token_response(self):
        responses.add(responses.POST, STRAVA_TOKEN_URL, json={
            'access_token': 's_access',
            'refresh_token': 's_refresh',
            'expires_at': 1710525600,
        })

    @responses.activate
    @freeze_time("2024-03-15 12:00:00")
    def test_withings_prints_weight(self, env, capsys):
        self.add_withings_responses()

        exit_code = main.main(['withings'])

        assert exit_code == 0
        assert capsys.readouterr().out.strip() == "Weight: 72.5 kg"
        measure_request = responses.calls[1].request
        assert 'lastupdate=1710417600' in measure_request.url
        # No Strava traffic without --strava
        assert len(responses.calls) == 2

    @responses.activate
    @freeze_time("2024-03-15 12:00:00")
    def test_withings_last_option(self, env, capsys):
        self.add_withings_responses()

        assert main.main(['withings', '--last', '2']) == 0
        assert f'lastupdate={1710504000 - 2 * 86400}' in responses.calls[1].request.url

    @responses.activate
    def test_withings_sync_to_strava(self, env, config_dir, capsys):
        self.add_withings_responses(grams=71800)
        self.add_strava_token_response()
        responses.add(responses.PUT, STRAVA_ATHLETE_URL, json={'id': 1, 'weight': 71.8})

        exit_code = main.main(['withings', '--strava'])

        assert exit_code == 0
        output = capsys.readouterr().out
        assert "Weight: 71.8 kg" in output
        assert "Syncing to Strava..." in output
        assert "Weight updated in Strava to 71.8 kg" in output
        assert responses.calls[-1].request.body == 'weight=71.8'

        # Both services rotated their stored refresh tokens
        assert json.loads((config_dir / "config.json").read_text())['refresh_token'] == 's_refresh'
        assert json.loads((config_dir / "withings_config.json").read_text())['refresh_token'] == 'w_refresh'

    @responses.activate
    def test_withings_no_measurements(self, env, capsys):
        responses.add(responses.POST, WITHINGS_TOKEN_URL, json={
            'status': 0,
            'body': {'access_token': 'w_access', 'refresh_token': 'w_refresh', 'expires_in': 10800},
        })
        responses.add(responses.GET, WITHINGS_MEASURE_URL, json={'status': 0, 'body': {'measuregrps': []}})

        exit_code = main.main(['withings', '--strava'])

        assert exit_code == 1
        captured = capsys.readouterr()
        assert "Error: No measurements available" in captured.err
        assert "Syncing" not in captured.out

    @responses.activate
    def test_strava_get_athlete(self, env, capsys):
        athlete = {'id': 42, 'firstname': 'Test', 'weight': 72.5}
        self.add_strava_token_response()
        responses.add(responses.GET, STRAVA_ATHLETE_URL, json=athlete)

        assert main.main(['strava', '--get-athlete']) == 0
        assert json.loads(capsys.readouterr().out) == athlete

    @responses.activate
    def test_strava_get_stats(self, env, capsys):
        stats = {'all_run_totals': {'count': 3, 'distance': 15000.0}}
        self.add_strava_token_response()
        responses.add(responses.GET, STRAVA_ATHLETE_URL, json={'id': 42})
        responses.add(responses.GET, "https://www.strava.com/api/v3/athletes/42/stats", json=stats)

        assert main.main(['strava', '--get-stats']) == 0
        output = capsys.readouterr().out
        assert json.loads(output) == stats
        assert '\n  "all_run_totals"' in output

    @responses.activate
    @patch('clients.strava_client.request_authorization_code', return_value='the_code')
    def test_strava_register(self, mock_request_code, env, config_dir, capsys):
        self.add_strava_token_response()

        assert main.main(['strava', '--register']) == 0
        assert "Strava authorization saved to" in capsys.readouterr().out
        assert 'code=the_code' in responses.calls[0].request.body

    def test_missing_credentials(self, env, capsys):
        with patch.dict(os.environ, {'STRAVA_CLIENT_ID': ''}):
            reset_config()
            exit_code = main.main(['strava', '--get-athlete'])

        assert exit_code == 1
        assert "STRAVA_CLIENT_ID" in capsys.readouterr().err

    def test_strava_requires_an_action(self, env):
        with pytest.raises(SystemExit) as exc_info:
            main.main(['strava'])
        assert exc_info.value.code == 2

    def test_subcommand_required(self, env):
        with pytest.raises(SystemExit) as exc_info:
            main.main([])
        assert exc_info.value.code == 2

    @pytest.mark.parametrize("value", ["0", "-1", "yesterday"])
    def test_invalid_last_option(self, env, value):
        with pytest.raises(SystemExit) as exc_info:
            main.main(['withings', '--last', value])
        assert exc_info.value.code == 2

    def test_verbosity_flags(self):
        assert main.resolve_log_level(main.parse_arguments(['-v', 'withings'])) == 'DEBUG'
        assert main.resolve_log_level(main.parse_arguments(['--quiet', 'withings'])) == 'ERROR'
        assert main.resolve_log_level(main.parse_arguments(['--log-level', 'warning', 'withings'])) == 'WARNING'
        assert main.resolve_log_level(main.parse_arguments(['withings'])) is None

    @responses.activate
    def test_strava_maintenance_page(self, env, capsys):
        """Test a non-JSON 200 reply is reported on stderr with exit status 1."""
        self.add_strava_token_response()
        responses.add(responses.GET, STRAVA_ATHLETE_URL, body="<html>maintenance</html>",
                      status=200, content_type="text/html")

        assert main.main(['strava', '--get-athlete']) == 1
        captured = capsys.readouterr()
        assert "Error: Failed to get athlete information: invalid JSON response" in captured.err
        assert captured.out == ""

    @responses.activate
    def test_ctrl_c_exits_130(self, env, capsys):
        with patch('clients.withings_client.WithingsClient.get_weight_by_date',
                   side_effect=KeyboardInterrupt):
            exit_code = main.main(['withings'])

        assert exit_code == 130
        assert "Aborted." in capsys.readouterr().err
