"""
Command Line Interface for PodQuad.
"""
import logging
import os

import click

from ..BUILDERS.definition_builder import ServiceDefinitionBuilder, validate_name
from ..errors import ActivationFailed, DependencyMissing, InvalidInput, PodquadError
from ..MANAGERS.dependencies import DependencyChecker
from ..MANAGERS.service_generator import ServiceGenerator
from ..MODELS.service_definition import NetworkMode
from ..MODELS.service_inputs import HealthCheckInputs, ServiceInputs
from ..MODELS.settings import GeneratorSettings
from ..PARSERS.service_config_parser import ServiceConfigParser
from ..RUNNERS.command_runner import CommandRunner
from ..UTILS.host_info import get_primary_ipv4

RULE = "═" * 63
LEVEL_COLORS = {logging.WARNING: "yellow", logging.ERROR: "red", logging.CRITICAL: "red"}


class ClickHandler(logging.Handler):
    """Sends log records to the terminal through click, colored by level."""

    def emit(self, record):
        try:
            msg = self.format(record)
            click.secho(msg, fg=LEVEL_COLORS.get(record.levelno), err=record.levelno >= logging.WARNING)
        except Exception:
            self.handleError(record)


def setup_logging(verbose: bool = False):
    logger = logging.getLogger("podquad")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not any(isinstance(h, ClickHandler) for h in logger.handlers):
        handler = ClickHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)


def section(title: str):
    click.secho(f"\n──── {title} ────", fg="blue", bold=True)


def fail(ctx, error: PodquadError):
    click.secho(f"Error: {error.message}", fg="red", err=True)
    for hint in error.hints:
        click.echo(f"  - {hint}", err=True)
    ctx.exit(1)


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Show debug output')
@click.option('--quadlet-dir', envvar='PODQUAD_QUADLET_DIR', default='/etc/containers/systemd',
              show_default=True, help='Directory for generated .container files')
@click.option('--summary-dir', envvar='PODQUAD_SUMMARY_DIR', default='/home/admin',
              show_default=True, help='Directory for deployment summaries')
@click.option('--admin-user', envvar='PODQUAD_ADMIN_USER', default='admin',
              show_default=True, help='Account granted access to service files')
@click.option('--settle-delay', envvar='PODQUAD_SETTLE_DELAY', default=5.0, type=float,
              show_default=True, help='Seconds to wait before checking the unit is active')
@click.pass_context
def cli(ctx, verbose, quadlet_dir, summary_dir, admin_user, settle_delay):
    """
    PodQuad - Podman Quadlet service generator.

    Turns a container image into a systemd-managed Podman service.
    """
    ctx.ensure_object(dict)
    setup_logging(verbose)
    ctx.obj.setdefault('settings', GeneratorSettings(
        quadlet_dir=quadlet_dir,
        summary_dir=summary_dir,
        admin_user=admin_user,
        settle_delay=settle_delay,
    ))
    ctx.obj.setdefault('runner', CommandRunner())


def prompt_inputs() -> ServiceInputs:
    """
    Collects the service answers interactively.
    """
    section("Basic Configuration")
    name = validate_name(click.prompt("Service name (e.g., homeassistant, nginxpm)", default="", show_default=False))
    image = click.prompt("Container image (e.g., homeassistant/home-assistant, jc21/nginx-proxy-manager)",
                         default="", show_default=False)

    section("User and Permissions")
    click.echo("How should this container run?")
    click.echo(" 1) As a dedicated non-root user (RECOMMENDED for most applications)")
    click.echo(" 2) As root only (for apps requiring root + low ports)")
    click.echo(" 3) As root with PUID/PGID (for linuxserver.io images)")
    user_mode = click.prompt("Enter choice", default="1")

    section("Network Configuration")
    click.echo("Select the container's network mode:")
    click.echo(" 1) Host networking (container shares LXC's network namespace)")
    click.echo(" 2) Bridge networking (isolated container network with port mapping)")
    network_mode = click.prompt("Enter choice", default="1")
    ports = ""
    if network_mode.strip() in ("2", NetworkMode.BRIDGE.value):
        ports = click.prompt("Enter ports to publish (comma-separated, e.g., 8080:80, 8443:443)",
                             default="", show_default=False)

    section("Volume Mappings")
    click.echo(f"You can use ./<name> as shorthand for /var/lib/{name}/<name>")
    click.echo("  nginx-proxy-manager: ./data:/data, ./letsencrypt:/etc/letsencrypt")
    click.echo("  Home Assistant:      ./config:/config, /etc/localtime:/etc/localtime:ro")
    volumes = click.prompt("Volume mappings", default="", show_default=False)

    section("Environment Variables")
    use_timezone = click.confirm("Set container timezone to match host?", default=True)
    environment = click.prompt("Additional environment variables (comma-separated, e.g. TZ=Europe/London)",
                               default="", show_default=False)

    section("Advanced Options")
    security_label_disable = click.confirm(
        "Disable SELinux/AppArmor labels? (needed for hardware access)", default=False)
    click.echo("Image pull policy:")
    click.echo(" 1) missing - Only pull if image is not present locally (fastest)")
    click.echo(" 2) always  - Always check for newer image (keeps up to date)")
    click.echo(" 3) never   - Never pull, use local only (for offline/testing)")
    pull_policy = click.prompt("Enter choice", default="1")
    auto_update = click.confirm("Enable automatic container updates with 'podman auto-update'?", default=True)

    health_check = None
    if click.confirm("Add health check?", default=False):
        health_check = HealthCheckInputs(
            command=click.prompt("  Health check command (e.g., 'curl -f http://localhost:8123/ || exit 1')",
                                 default="", show_default=False),
            interval=click.prompt("  Check interval", default="30s"),
            retries=click.prompt("  Retries before unhealthy", default="3"),
        )

    return ServiceInputs(
        name=name,
        image=image,
        user_mode=user_mode,
        network_mode=network_mode,
        ports=ports,
        volumes=volumes,
        use_timezone=use_timezone,
        environment=environment,
        security_label_disable=security_label_disable,
        pull_policy=pull_policy,
        auto_update=auto_update,
        health_check=health_check,
    )


def confirm_relative_path(path: str, suggestion: str) -> bool:
    return click.confirm(f"Use suggested path {suggestion} instead of {path}?", default=True)


def confirm_install(package: str) -> bool:
    return click.confirm(f"Would you like to install {package} now?", default=True)


@cli.command()
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True, dir_okay=False),
              help='Read answers from a YAML file instead of prompting')
@click.option('--env-file', type=click.Path(exists=True, dir_okay=False),
              help='Add environment variables from a dotenv file')
@click.pass_context
def create(ctx, config_path, env_file):
    """Create, start and document a Quadlet container service."""
    if os.geteuid() != 0:
        click.secho("This command must be run as root. Please use 'sudo'.", fg="red", err=True)
        ctx.exit(1)

    settings = ctx.obj['settings']
    runner = ctx.obj['runner']
    interactive = config_path is None

    try:
        checker = ctx.obj.get('dependencies') or DependencyChecker(runner)
        if interactive:
            available = checker.ensure("podman", "podman", confirm_install)
        else:
            available = checker.ensure("podman", "podman", lambda package: False)
            if not available:
                raise DependencyMissing("podman is not installed.", hints=["Run without --config to install it."])
        if not available:
            click.echo("Installation declined. Exiting.")
            ctx.exit(0)

        if interactive:
            click.secho(RULE, fg="blue")
            click.secho("   Podman Quadlet Service Generator", fg="blue")
            click.secho(RULE, fg="blue")
            inputs = prompt_inputs()
            base_dir = "."
        else:
            inputs = ServiceConfigParser().parse(config_path)
            base_dir = os.path.dirname(os.path.abspath(config_path))
        if env_file:
            if inputs.env_file:
                raise InvalidInput(
                    f"--env-file conflicts with env_file: {inputs.env_file} in {config_path}",
                    hints=["Remove env_file from the config or drop --env-file"],
                )
            inputs = inputs.model_copy(update={'env_file': os.path.abspath(env_file)})

        builder = ServiceDefinitionBuilder(
            confirm_path=confirm_relative_path if interactive else None,
            base_dir=base_dir,
        )
        svc = builder.build(inputs)

        access_ip = ctx.obj.get('access_ip') or get_primary_ipv4()
        generator = ctx.obj.get('generator') or ServiceGenerator(settings, runner)

        section("Generating Service")
        report = generator.generate(svc, access_ip=access_ip)
    except PodquadError as e:
        fail(ctx, e)
        return

    svc = report.definition
    activation = report.activation
    click.secho(f"\n{RULE}\n   Deployment Summary\n{RULE}\n", fg="blue")
    for warning in builder.warnings:
        click.secho(f"⚠ {warning}", fg="yellow")
    if builder.warnings:
        click.echo()

    if not activation.ok:
        click.secho("✗ FAILED - Service failed to become active\n", fg="red", err=True)
        fail(ctx, ActivationFailed(activation.detail, hints=activation.hints + [
            f"Check config: cat {report.quadlet_path}",
            f"Manual test: podman run --rm {svc.image}",
        ]))

    click.secho("✓ SUCCESS - Service is active and running\n", fg="green")
    click.echo(f"  Name:        {svc.name}")
    click.echo(f"  Image:       {svc.image}")
    click.echo(f"  User Mode:   {svc.user_mode.value}")
    click.echo(f"  Network:     {svc.network_mode.value}")
    if access_ip and svc.network_mode == NetworkMode.HOST:
        click.echo(f"  Access:      http://{access_ip} (on app's port)")
    click.echo(f"  Quadlet:     {report.quadlet_path}")
    click.echo(f"  Status:      systemctl status {svc.unit_name}")
    click.echo(f"  Logs:        journalctl -u {svc.unit_name} -f")
    if report.summary_path:
        click.secho(f"\n✓ Deployment summary saved to: {report.summary_path}", fg="green")


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})

if __name__ == '__main__':
    main()
