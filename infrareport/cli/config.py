"""CLI commands for global configuration management."""

from typing import Optional

import typer

from infrareport import global_config
from infrareport.config import (
    API_KEY_ENV_VARS,
    AVAILABLE_IMAGE_MODELS,
    AVAILABLE_MODELS,
    CREDENTIAL_KEY,
    DEFAULT_ANALYSIS_MODEL,
    DEFAULT_IMAGE_MODEL,
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
)
from infrareport.cli.utils import mask_secret

# Subcommand group for configuration management
config_app = typer.Typer(
    name="config",
    help="Manage global infrareport configuration in ~/.infrareport/",
    add_completion=False,
)


@config_app.command("show")
def config_show() -> None:
    """Show current global configuration."""
    try:
        if not global_config.is_configured():
            typer.echo("No configuration found. Run 'infrareport config init' to set up.")
            return

        config = global_config.load_global_config()

        typer.echo("Current infrareport configuration (~/.infrareport/config.yaml):")
        typer.echo()
        typer.echo(f"  Analysis Model: {config.get('model', DEFAULT_ANALYSIS_MODEL)}")
        typer.echo(f"  Image Model: {config.get('image_model', DEFAULT_IMAGE_MODEL)}")
        typer.echo(f"  Max Tokens: {config.get('max_tokens', DEFAULT_MAX_TOKENS)}")
        typer.echo(f"  Temperature: {config.get('temperature', DEFAULT_TEMPERATURE)}")

        for section in ("rate_limit", "cache", "retry"):
            values = global_config.get_section(section)
            if values:
                typer.echo()
                typer.echo(f"  {section.replace('_', ' ').title()}:")
                for key, value in values.items():
                    typer.echo(f"    {key}: {value}")

        typer.echo()

        api_key = global_config.get_credential(CREDENTIAL_KEY)
        if api_key:
            typer.echo(f"  API Key ({CREDENTIAL_KEY}): {mask_secret(api_key)}")
        else:
            typer.echo(f"  API Key ({CREDENTIAL_KEY}): not set")
            typer.echo(f"  (environment variables {', '.join(API_KEY_ENV_VARS)} are also checked)")

    except global_config.GlobalConfigError as e:
        typer.echo(f"Error reading configuration: {e}", err=True)
        raise typer.Exit(1)


@config_app.command("set-key")
def config_set_key() -> None:
    """Set or update the Gemini API key."""
    api_key = typer.prompt("Enter your Gemini API key", hide_input=True)
    if not api_key.strip():
        typer.echo("API key cannot be empty.", err=True)
        raise typer.Exit(1)

    try:
        global_config.ensure_global_config_dir()
        global_config.save_credential(CREDENTIAL_KEY, api_key.strip())
    except (OSError, global_config.GlobalConfigError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo("✓ API key saved to ~/.infrareport/credentials")


@config_app.command("set-model")
def config_set_model(
    model: Optional[str] = typer.Option(
        None,
        "--model",
        "-m",
        help="Gemini model used for the structural analysis",
    ),
    image_model: Optional[str] = typer.Option(
        None,
        "--image-model",
        help="Imagen model used for the repaired visualization",
    ),
) -> None:
    """Set the analysis and/or image model."""
    if not model and not image_model:
        typer.echo("Nothing to set. Pass --model and/or --image-model.", err=True)
        raise typer.Exit(1)

    for value, known in ((model, AVAILABLE_MODELS), (image_model, AVAILABLE_IMAGE_MODELS)):
        if value and value not in known:
            typer.echo(f"Warning: {value} is not in the list of known models")
            if not typer.confirm("Continue anyway?", default=False):
                raise typer.Exit(0)

    try:
        global_config.ensure_global_config_dir()
        global_config.set_models(analysis_model=model, image_model=image_model)
    except (OSError, global_config.GlobalConfigError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if model:
        typer.echo(f"✓ Analysis model set to: {model}")
    if image_model:
        typer.echo(f"✓ Image model set to: {image_model}")


@config_app.command("init")
def config_init() -> None:
    """Initialize infrareport global configuration interactively."""
    typer.echo("Welcome to infrareport! Let's set up your configuration.")
    typer.echo()

    if global_config.is_configured():
        overwrite = typer.confirm(
            "Configuration already exists at ~/.infrareport/config.yaml. Overwrite?",
            default=False,
        )
        if not overwrite:
            typer.echo("Keeping existing configuration.")
            raise typer.Exit(0)

    typer.echo("Available analysis models:")
    for i, name in enumerate(AVAILABLE_MODELS, 1):
        typer.echo(f"  {i}. {name}")

    model_choice = typer.prompt(
        f"Select a model (1-{len(AVAILABLE_MODELS)})",
        type=int,
        default=1,
    )
    if model_choice < 1 or model_choice > len(AVAILABLE_MODELS):
        typer.echo("Invalid choice. Aborting.", err=True)
        raise typer.Exit(1)

    selected_model = AVAILABLE_MODELS[model_choice - 1]

    typer.echo()
    api_key = typer.prompt("Enter your Gemini API key", hide_input=True)

    try:
        config_file = global_config.get_config_file_path()
        if config_file.exists():
            config_file.unlink()
        global_config.initialize_default_config()
        global_config.set_models(analysis_model=selected_model)
        global_config.save_credential(CREDENTIAL_KEY, api_key.strip())
    except (OSError, global_config.GlobalConfigError) as e:
        typer.echo(f"Error saving configuration: {e}", err=True)
        raise typer.Exit(1)

    typer.echo()
    typer.echo("✓ Configuration saved to ~/.infrareport/")
    typer.echo(f"  Analysis Model: {selected_model}")
    typer.echo()
    typer.echo("You can now run 'infrareport generate IMAGE -d \"description\"'.")
