"""
Tests for the sgnl-job command line.
"""

import json
from unittest.mock import patch

import httpx
import pytest

from sgnl_job.cli.main import create_parser, main
from sgnl_job.job import HelloWorldJob
from sgnl_job.security.secrets import SecretsManager


@pytest.fixture
def params_file(tmp_path):
    path = tmp_path / 'params.json'
    path.write_text(json.dumps({
        'url': 'https://hooks.example.com/{$.hook}',
        'message': 'Hello {$.user.name}!',
        'optional': '{$.missing}',
    }))
    return path


@pytest.fixture
def context_file(tmp_path):
    path = tmp_path / 'context.yaml'
    path.write_text(
        "data:\n"
        "  hook: hello\n"
        "  user:\n"
        "    name: Ana\n"
        "secrets:\n"
        "  bearer_token: tok_cli\n"
    )
    return path


class TestResolveCommand:
    """Test `sgnl-job resolve`."""

    def test_resolves_with_context_file(self, params_file, context_file, capsys):
        exit_code = main(['resolve', str(params_file), '--context-file', str(context_file)])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output == {
            'url': 'https://hooks.example.com/hello',
            'message': 'Hello Ana!',
            'optional': '{No Value}',
        }

    def test_context_pairs_with_dotted_keys(self, params_file, capsys):
        exit_code = main([
            'resolve', str(params_file),
            '--context', 'hook=abc',
            '--context', 'user.name=Bo',
        ])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output['url'] == 'https://hooks.example.com/abc'
        assert output['message'] == 'Hello Bo!'

    def test_omit_no_value(self, params_file, context_file, capsys):
        exit_code = main([
            'resolve', str(params_file), '--context-file', str(context_file), '--omit-no-value'
        ])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert 'optional' not in output

    def test_plain_context_file_is_data(self, tmp_path, capsys):
        params = tmp_path / 'params.yaml'
        params.write_text("greeting: 'Hi {$.name}'\n")
        context = tmp_path / 'context.json'
        context.write_text(json.dumps({'name': 'Cy'}))

        assert main(['resolve', str(params), '--context-file', str(context)]) == 0
        assert json.loads(capsys.readouterr().out) == {'greeting': 'Hi Cy'}

    def test_no_namespace(self, tmp_path, capsys):
        params = tmp_path / 'params.json'
        params.write_text(json.dumps({'at': '{$.sgnl.time.now}'}))

        assert main(['resolve', str(params), '--no-namespace']) == 0
        assert json.loads(capsys.readouterr().out) == {'at': '{No Value}'}

    def test_unquoted_date_in_context_stays_text(self, tmp_path, capsys):
        params = tmp_path / 'params.json'
        params.write_text(json.dumps({'when': '{$.start}', 'at': 'starts {$.start}'}))
        context = tmp_path / 'context.yaml'
        context.write_text("start: 2025-12-04\n")

        exit_code = main(['resolve', str(params), '--context-file', str(context), '--no-namespace'])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out) == {'when': '2025-12-04', 'at': 'starts 2025-12-04'}

    def test_unquoted_date_in_params_passes_through(self, tmp_path, capsys):
        params = tmp_path / 'params.yaml'
        params.write_text("when: 2025-12-04\nstamp: 2025-12-04T17:30:00Z\n")

        assert main(['resolve', str(params)]) == 0
        assert json.loads(capsys.readouterr().out) == {
            'when': '2025-12-04',
            'stamp': '2025-12-04T17:30:00Z',
        }

    def test_missing_params_file(self, tmp_path):
        assert main(['resolve', str(tmp_path / 'nope.json')]) == 1

    def test_invalid_context_pair(self, params_file):
        assert main(['resolve', str(params_file), '--context', 'novalue']) == 2


class TestInvokeCommand:
    """Test `sgnl-job invoke`."""

    def _mock_job(self, status_code=200):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(status_code, json={'ok': status_code < 400})

        client = httpx.Client(transport=httpx.MockTransport(handler))
        return HelloWorldJob(client=client, secrets_manager=SecretsManager()), requests

    def test_invoke_success(self, params_file, context_file, capsys):
        job, requests = self._mock_job()

        with patch('sgnl_job.cli.commands.invoke.HelloWorldJob', return_value=job):
            exit_code = main(['invoke', str(params_file), '--context-file', str(context_file)])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output['success'] is True
        assert output['response_body'] == {'ok': True}
        assert str(requests[0].url) == 'https://hooks.example.com/hello'
        assert requests[0].headers['Authorization'] == 'Bearer tok_cli'

    def test_invoke_missing_secret(self, params_file, monkeypatch):
        monkeypatch.delenv('BEARER_TOKEN', raising=False)
        job, requests = self._mock_job()

        with patch('sgnl_job.cli.commands.invoke.HelloWorldJob', return_value=job):
            exit_code = main(['invoke', str(params_file), '--context', 'hook=x'])

        assert exit_code == 2
        assert requests == []

    def test_invoke_http_failure(self, params_file, context_file):
        job, _ = self._mock_job(status_code=500)

        with patch('sgnl_job.cli.commands.invoke.HelloWorldJob', return_value=job):
            exit_code = main(['invoke', str(params_file), '--context-file', str(context_file)])

        assert exit_code == 1


class TestParser:
    """Test argument parsing."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert 'usage' in capsys.readouterr().out

    def test_invoke_defaults(self):
        args = create_parser().parse_args(['invoke', 'params.json'])
        assert args.timeout == 30.0
        assert args.log_level == 'info'
        assert args.context is None

    def test_secrets_from_env_flag(self):
        args = create_parser().parse_args(['invoke', 'params.json', '--secrets-from-env'])
        assert args.secrets_from_env is True
        assert create_parser().parse_args(['invoke', 'params.json']).secrets_from_env is False


class TestLoadDocument:
    """Test reading params and context files."""

    def test_yaml_types_other_than_dates_kept(self, tmp_path):
        from sgnl_job.cli.commands.inputs import load_document

        path = tmp_path / 'doc.yaml'
        path.write_text("n: 3\nf: 1.5\nok: true\nnone: null\nday: 2025-01-02\n")

        assert load_document(str(path)) == {'n': 3, 'f': 1.5, 'ok': True, 'none': None, 'day': '2025-01-02'}
