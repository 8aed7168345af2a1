import io
import os
import unittest
from unittest.mock import patch

from releasedock.cli import build_parser, command_from_args, format_http_error, main
from releasedock.client import ReleaseDockError, ReleaseDockHTTPError
from releasedock.commands import (
    AccessKeyList,
    AccessKeyRemove,
    AppAdd,
    AppList,
    AppRename,
    Deploy,
    DeploymentKeyList,
    DeploymentList,
    DeploymentRemove,
    Login,
    Logout,
)


def _command(argv):
    return command_from_args(build_parser().parse_args(argv))


class TestCommandFromArgs(unittest.TestCase):
    def test_app_commands(self) -> None:
        self.assertEqual(_command(["app", "add", "MyApp"]), AppAdd(app_name="MyApp"))
        self.assertEqual(_command(["app", "ls", "--format", "json"]), AppList(format="json"))
        self.assertEqual(_command(["app", "list"]), AppList(format="table"))
        self.assertEqual(_command(["app", "rename", "a", "c"]), AppRename(current_app_name="a", new_app_name="c"))

    def test_deployment_commands(self) -> None:
        self.assertEqual(
            _command(["deployment", "list", "a", "-v", "--format", "json"]),
            DeploymentList(app_name="a", format="json", verbose=True),
        )
        self.assertEqual(
            _command(["deployment", "rm", "a", "Staging"]),
            DeploymentRemove(app_name="a", deployment_name="Staging"),
        )
        self.assertEqual(
            _command(["deployment-key", "ls", "a", "Production"]),
            DeploymentKeyList(app_name="a", deployment_name="Production", format="table"),
        )

    def test_access_key_commands(self) -> None:
        self.assertEqual(_command(["access-key", "list"]), AccessKeyList(format="table"))
        self.assertEqual(_command(["access-key", "remove", "8"]), AccessKeyRemove(access_key_name="8"))

    def test_deploy(self) -> None:
        self.assertEqual(
            _command(["deploy", "a", "./build", "1.0.0", "--description", "fix", "--mandatory"]),
            Deploy(
                app_name="a",
                deployment_name="Staging",
                package_path="./build",
                min_app_version="1.0.0",
                description="fix",
                mandatory=True,
            ),
        )

    def test_auth_commands_use_server_url_override(self) -> None:
        self.assertEqual(_command(["logout"]), Logout())
        self.assertEqual(
            _command(["login", "--server-url", "https://rd.example/"]),
            Login(server_url="https://rd.example"),
        )
        with patch.dict(os.environ, {"RELEASEDOCK_SERVER_URL": "https://env.example"}):
            self.assertEqual(_command(["login"]), Login(server_url="https://env.example"))


class TestMain(unittest.TestCase):
    def test_success_returns_zero(self) -> None:
        with patch("releasedock.cli.execute") as mock_execute:
            rc = main(["app", "list", "--format", "json"])

        self.assertEqual(rc, 0)
        command, ctx = mock_execute.call_args.args
        self.assertEqual(command, AppList(format="json"))

    def test_domain_error_prints_one_line_and_returns_one(self) -> None:
        with (
            patch("releasedock.cli.execute", side_effect=ReleaseDockError('App "x" does not exist.')),
            patch("sys.stderr", new=io.StringIO()) as stderr,
        ):
            rc = main(["app", "rm", "x"])

        self.assertEqual(rc, 1)
        self.assertEqual(stderr.getvalue(), 'error: App "x" does not exist.\n')

    def test_http_error_is_formatted(self) -> None:
        with (
            patch("releasedock.cli.execute", side_effect=ReleaseDockHTTPError(404, '{"message": "no such app"}')),
            patch("sys.stderr", new=io.StringIO()) as stderr,
        ):
            rc = main(["app", "rm", "x"])

        self.assertEqual(rc, 1)
        self.assertIn("HTTP 404 Not Found.", stderr.getvalue())
        self.assertIn("no such app", stderr.getvalue())

    def test_timeout_flag_reaches_context(self) -> None:
        with patch("releasedock.cli.execute") as mock_execute:
            main(["--timeout-s", "5", "app", "list"])

        _, ctx = mock_execute.call_args.args
        self.assertEqual(ctx.timeout_s, 5.0)


class TestHttpErrorFormatting(unittest.TestCase):
    def test_plain_body_is_appended(self) -> None:
        self.assertEqual(format_http_error(ReleaseDockHTTPError(500, "boom")), "HTTP 500 boom")

    def test_unauthorized_suggests_login(self) -> None:
        self.assertIn("releasedock login", format_http_error(ReleaseDockHTTPError(401, "")))


if __name__ == "__main__":
    unittest.main()
