"""CLI: safal auth login|status|logout|reset-password, safal policy"""

import click
from rich.console import Console

from safal_auth.client import CREDENTIALS_FILE, AsyncSafalAuth
from safal_auth.errors import SafalError
from safal_auth.login import AuthState, LoginFlow
from safal_auth.models.policy import PRIVACY_POLICY, TERMS_AND_CONDITIONS
from safal_auth.models.verification import ContactKind
from safal_auth.store import CredentialStore, JsonFileStore

console = Console()


def _get_client() -> AsyncSafalAuth:
    from safal_auth.cli.main import _get_client
    return _get_client()


def _run(coro):
    from safal_auth.cli.main import _run
    return _run(coro)


def _print_messages(flow) -> None:
    for field, message in vars(flow.field_errors).items():
        if message:
            console.print(f"[red]{field}: {message}[/red]")
    if flow.error_message:
        console.print(f"[red]{flow.error_message.text}[/red]")
    if flow.success_message:
        console.print(f"[green]{flow.success_message.text}[/green]")


def _choose_method(flow: LoginFlow) -> ContactKind:
    methods = flow.challenge.available_methods
    if len(methods) == 1:
        return methods[0]
    labels = {m.value: m for m in methods}
    choice = click.prompt("Send the code by", type=click.Choice(list(labels)), show_choices=True)
    return labels[choice]


@click.group()
def auth():
    """Authentication commands."""


@auth.command("login")
@click.option("--organization", is_flag=True, help="Sign in with an organization account")
@click.option("--remember", is_flag=True, help="Remember the email for next time")
def auth_login(organization: bool, remember: bool):
    """Sign in with email and password."""

    async def _login():
        async with _get_client() as client:
            flow = client.login
            email = click.prompt("Email", default=flow.remembered_email or None)
            password = click.prompt("Password", hide_input=True)
            with console.status("Signing in..."):
                state = await flow.submit(email, password, is_organization=organization, remember_me=remember)

            while state in (AuthState.AWAITING_METHOD_SELECTION, AuthState.AWAITING_OTP):
                if state == AuthState.AWAITING_METHOD_SELECTION:
                    method = _choose_method(flow)
                    with console.status("Sending verification code..."):
                        state = await flow.select_method(method)
                    _print_messages(flow)
                    if state == AuthState.AWAITING_METHOD_SELECTION and not click.confirm("Try again?"):
                        flow.cancel()
                        break
                    continue

                code = click.prompt("Verification code (blank to resend)", default="", show_default=False)
                if not code:
                    with console.status("Resending..."):
                        state = await flow.select_method(flow.challenge.method)
                    _print_messages(flow)
                    continue
                with console.status("Verifying..."):
                    state = await flow.submit_otp(code)
                if state == AuthState.AWAITING_OTP:
                    _print_messages(flow)

            if flow.is_authenticated:
                name = client.credentials.display_name() or email
                console.print(f"[green]Logged in as {name} (ID: {client.credentials.user_id()})[/green]")
            else:
                _print_messages(flow)
                raise SystemExit(1)

    _run(_login())


@auth.command("status")
def auth_status():
    """Show current auth status."""
    credentials = CredentialStore(JsonFileStore(CREDENTIALS_FILE))
    if credentials.get():
        console.print(
            f"[green]Logged in[/green] as {credentials.display_name() or 'unknown'} "
            f"(ID: {credentials.user_id()})"
        )
    else:
        console.print("[yellow]Not logged in. Run `safal auth login`.[/yellow]")


@auth.command("logout")
def auth_logout():
    """Clear saved credentials."""

    async def _logout():
        async with _get_client() as client:
            await client.login.sign_out()
        console.print("[green]Logged out.[/green]")

    _run(_logout())


@auth.command("reset-password")
def auth_reset_password():
    """Reset a forgotten password via an emailed code."""

    async def _reset():
        async with _get_client() as client:
            flow = client.password_reset
            email = click.prompt("Email")
            with console.status("Sending verification code..."):
                sent = await flow.request_email_verification(email)
            _print_messages(flow)
            if not sent:
                raise SystemExit(1)

            new_password = click.prompt("New password", hide_input=True)
            confirm_password = click.prompt("Confirm new password", hide_input=True)
            code = click.prompt("Verification code")
            with console.status("Resetting password..."):
                done = await flow.confirm_reset_code(code, new_password, confirm_password)
            _print_messages(flow)
            if not done:
                raise SystemExit(1)

    _run(_reset())


@click.command("policy")
@click.argument("kind", type=click.Choice(["terms", "privacy"]))
def policy(kind: str):
    """Print the terms and conditions or the privacy policy."""

    async def _fetch():
        async with _get_client() as client:
            doc_type = TERMS_AND_CONDITIONS if kind == "terms" else PRIVACY_POLICY
            try:
                with console.status("Fetching..."):
                    doc = await client.policies.fetch(doc_type)
            except SafalError as e:
                console.print(f"[red]{e.message}[/red]")
                raise SystemExit(1)
            console.print(f"[bold]{doc.name or doc_type}[/bold] {doc.version or ''}")
            console.print(doc.content or doc.pdf_link or "")

    _run(_fetch())
