"""
Unit Tests for the command-line interface
Tests for: argument parsing, exit codes, prompts, rendered output
"""
import io

import pytest
from rich.console import Console

from market_navigator import main as cli
from market_navigator.logging_config import setup_logging
from market_navigator.main import create_parser, main


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def log_stream():
    """Capture the market_navigator logger"""
    stream = io.StringIO()
    setup_logging("WARNING", stream=stream)
    yield stream
    setup_logging()


@pytest.fixture
def run(navigator, output):
    """Run the CLI against the mock backend and return its exit code"""
    console = Console(file=output, width=160)

    def _run(*argv):
        with pytest.raises(SystemExit) as exc_info:
            main(list(argv), navigator=navigator, console=console)
        return exc_info.value.code

    return _run


class TestParser:
    """Test argument parsing"""

    def test_profile_countries_repeatable(self):
        """Test --target-country collects a list"""
        args = create_parser().parse_args(["profile", "--target-country", "US", "--target-country", "JP"])

        assert args.target_countries == ["US", "JP"]

    def test_sector_choices(self):
        """Test an unknown sector is rejected by argparse"""
        with pytest.raises(SystemExit):
            create_parser().parse_args(["profile", "--sector", "Spices"])

    def test_no_command_prints_help(self, capsys):
        """Test running without a command exits 1"""
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 1
        assert "market-navigator" in capsys.readouterr().out


class TestUserCommands:
    """Test signin, whoami, profile and signout"""

    def test_signin_success(self, run, credentials, output, storage):
        """Test a good sign-in exits 0 and stores the token"""
        code = run("signin", "--email", credentials["email"], "--password", credentials["password"])

        assert code == 0
        assert "Signed in" in output.getvalue()
        assert storage.get_item("token") is not None

    def test_signin_failure(self, run, credentials, output):
        """Test the backend message is shown and exit code is 1"""
        code = run("signin", "--email", credentials["email"], "--password", "wrong")

        assert code == 1
        assert "Invalid credentials" in output.getvalue()

    def test_signin_prompts_for_password(self, run, credentials, monkeypatch):
        """Test the password is asked for without echo"""
        asked = []

        def fake_ask(prompt, password=False, **kwargs):
            asked.append((prompt, password))
            return credentials["password"]

        monkeypatch.setattr(cli.Prompt, "ask", fake_ask)

        code = run("signin", "--email", credentials["email"])

        assert code == 0
        assert asked == [("Password", True)]

    def test_whoami_signed_in(self, run, credentials, output):
        """Test whoami renders the account panel"""
        run("signin", "--email", credentials["email"], "--password", credentials["password"])

        code = run("whoami")

        assert code == 0
        assert credentials["user"]["companyName"] in output.getvalue()
        assert "incomplete" in output.getvalue()

    def test_whoami_anonymous(self, run, output):
        """Test whoami without a session exits 1"""
        assert run("whoami") == 1
        assert "Not signed in" in output.getvalue()

    def test_profile_update(self, run, credentials, output, backend):
        """Test profile flags are sent and the profile becomes complete"""
        run("signin", "--email", credentials["email"], "--password", credentials["password"])

        code = run(
            "profile",
            "--sector", "Seafood",
            "--hs-code", "0306",
            "--target-country", "US",
        )

        assert code == 0
        assert "Profile updated" in output.getvalue()
        assert backend.users[credentials["email"]]["targetCountries"] == ["US"]

    def test_profile_requires_session(self, run, backend):
        """Test profile without a session sends nothing"""
        assert run("profile", "--hs-code", "0306") == 1
        assert backend.calls("PUT", "/users/profile") == []

    def test_signout(self, run, credentials, storage):
        """Test signout clears the token"""
        run("signin", "--email", credentials["email"], "--password", credentials["password"])

        assert run("signout") == 0
        assert storage.get_item("token") is None

    def test_signup(self, run, output, backend):
        """Test a fully specified signup needs no prompts"""
        code = run(
            "signup",
            "--email", "new@exporter.in",
            "--password", "s3cret-pass",
            "--company-name", "Malabar Spices",
            "--contact-person", "Devi",
            "--user-type", "Indian",
            "--role", "Seller",
        )

        assert code == 0
        assert "Account created" in output.getvalue()
        assert "new@exporter.in" in backend.users

    def test_network_down(self, run, backend, output):
        """Test an unreachable backend is a handled failure"""
        backend.network_down = True

        assert run("signin", "--email", "a@b.c", "--password", "x") == 1
        assert "Network error" in output.getvalue()

    def test_verbose_failure_is_logged(self, run, credentials, output, log_stream):
        """Test --verbose logs the handled error"""
        code = run("--verbose", "signin", "--email", credentials["email"], "--password", "wrong")

        assert code == 1
        assert "Invalid credentials" in output.getvalue()
        logged = log_stream.getvalue()
        assert "Error in command signin: AuthenticationError: Invalid credentials" in logged

    def test_failure_not_logged_without_verbose(self, run, credentials, log_stream):
        """Test a handled error stays off the log by default"""
        run("signin", "--email", credentials["email"], "--password", "wrong")

        assert "Error in command" not in log_stream.getvalue()


class TestAdminCommands:
    """Test admin login/verify/logout"""

    def test_login_and_verify(self, run, admin_credentials, output):
        """Test admin login then verify both succeed"""
        assert run("admin", "login", "--admin-id", admin_credentials["admin_id"],
                   "--password", admin_credentials["password"]) == 0

        assert run("admin", "verify") == 0
        assert admin_credentials["admin_id"] in output.getvalue()

    def test_bad_login(self, run, admin_credentials, notifier):
        """Test rejected credentials exit 1 with the toast"""
        code = run("admin", "login", "--admin-id", admin_credentials["admin_id"], "--password", "wrong")

        assert code == 1
        assert notifier.last.message == "Invalid admin credentials"

    def test_verify_without_session(self, run, backend):
        """Test verify with nothing stored makes no request"""
        assert run("admin", "verify") == 1
        assert backend.requests == []

    def test_logout(self, run, admin_credentials, storage):
        """Test admin logout clears adminToken"""
        run("admin", "login", "--admin-id", admin_credentials["admin_id"], "--password", admin_credentials["password"])

        assert run("admin", "logout") == 0
        assert storage.get_item("adminToken") is None


class TestTradeDataCommands:
    """Test trade-data subcommands"""

    def test_summary_requires_admin(self, run, output):
        """Test the admin requirement is reported"""
        assert run("trade-data", "summary") == 1
        assert "Admin login required" in output.getvalue()

    def test_upload_and_summary(self, run, admin_credentials, tmp_path, output):
        """Test uploading a CSV then reading the summary"""
        csv_path = tmp_path / "trade.csv"
        csv_path.write_text("year,partner,sector,value\n")
        run("admin", "login", "--admin-id", admin_credentials["admin_id"], "--password", admin_credentials["password"])

        assert run("trade-data", "upload", str(csv_path)) == 0
        assert run("trade-data", "summary") == 0
        assert "Successfully uploaded 3 trade records" in output.getvalue()
        assert "totalRecords" in output.getvalue()

    def test_clear_needs_confirmation(self, run, admin_credentials, backend, monkeypatch):
        """Test declining the prompt sends nothing"""
        run("admin", "login", "--admin-id", admin_credentials["admin_id"], "--password", admin_credentials["password"])
        monkeypatch.setattr(cli.Confirm, "ask", lambda *args, **kwargs: False)

        assert run("trade-data", "clear") == 1
        assert backend.calls("DELETE", "/trade-data/clear") == []

    def test_clear_with_yes(self, run, admin_credentials, backend):
        """Test --yes skips the prompt"""
        run("admin", "login", "--admin-id", admin_credentials["admin_id"], "--password", admin_credentials["password"])

        assert run("trade-data", "clear", "--yes") == 0
        assert backend.calls("DELETE", "/trade-data/clear")

    def test_clear_with_empty_response(self, run, admin_credentials, backend, output):
        """Test a 204 without a body still reports success"""
        run("admin", "login", "--admin-id", admin_credentials["admin_id"], "--password", admin_credentials["password"])
        backend.respond("DELETE", "/trade-data/clear", status_code=204, content=b"")

        assert run("trade-data", "clear", "--yes") == 0
        assert "Trade data cleared" in output.getvalue()

    def test_upload_with_empty_response(self, run, admin_credentials, backend, tmp_path, output):
        """Test an upload answered with no body falls back to the default message"""
        csv_path = tmp_path / "trade.csv"
        csv_path.write_text("year,partner,sector,value\n")
        run("admin", "login", "--admin-id", admin_credentials["admin_id"], "--password", admin_credentials["password"])
        backend.respond("POST", "/trade-data/upload", status_code=204, content=b"")

        assert run("trade-data", "upload", str(csv_path)) == 0
        assert "Upload complete" in output.getvalue()


class TestForumCommands:
    """Test forum subcommands"""

    def test_posts_table(self, run, credentials, backend, output):
        """Test posts are listed with pagination"""
        backend.add_post("Shrimp demand in Japan", category="market-insights")
        run("signin", "--email", credentials["email"], "--password", credentials["password"])

        assert run("forum", "posts", "--category", "market-insights") == 0
        assert "Shrimp demand in Japan" in output.getvalue()
        assert "Page 1 of 1" in output.getvalue()

    def test_post_detail(self, run, credentials, backend, output):
        """Test a single post with replies"""
        post = backend.add_post("Textile certification", replies=[
            {"content": "Try OEKO-TEX", "isAcceptedAnswer": True, "author": {"name": "Meera"}},
        ])
        run("signin", "--email", credentials["email"], "--password", credentials["password"])

        assert run("forum", "post", post["id"]) == 0
        assert "Try OEKO-TEX" in output.getvalue()

    def test_expired_session(self, run, storage, output, navigated):
        """Test a 401 exits 1, clears the token and asks to sign in again"""
        storage.set_item("token", "revoked")

        assert run("forum", "posts") == 1
        assert "Please sign in again" in output.getvalue()
        assert storage.get_item("token") is None
        assert navigated == ["/auth/signin"]
