"""
Mise - CLI Entry Point.

Usage:
    mise cook "I have chicken and rice"     Stream a recipe
    mise ideas "eggs, spinach" --meal breakfast
    mise saved --meal dinner                Browse saved ideas
    mise shopping --add-recipe <id>         Build a shopping list
    mise health                             Check configuration
    mise --help                             Show help
"""

import asyncio
import logging

import typer
from rich.console import Console
from rich.live import Live
from rich.markdown import Markdown
from rich.panel import Panel
from rich.spinner import Spinner
from rich.table import Table

from mise.core.errors import APIError, ErrorCode
from mise.models.entities import Ingredient, MealType, ProteinType

app = typer.Typer(
    name="mise",
    help="Mise - AI recipes from the ingredients you already have.",
    add_completion=False,
)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
) -> None:
    from mise.config import settings

    logging.basicConfig(
        level="DEBUG" if verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Keep the terminal readable while streaming
    for noisy in ("httpx", "openai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# =============================================================================
# Wiring
# =============================================================================


def _get_store():
    from mise.config import settings
    from mise.storage import JsonFileBackend, PersistenceStore

    return PersistenceStore(JsonFileBackend(settings.store_path))


def _build(generator_cls, provider: str | None, model: str | None, api_key: str | None, locale: str | None):
    from mise.config import settings
    from mise.core.classifier import ErrorClassifier
    from mise.llm.registry import build_default_registry
    from mise.observability import SessionLogger

    store = _get_store()
    provider = provider or store.get_last_provider() or settings.default_provider
    # A saved key for the provider wins over the MISE_API_KEY fallback
    if not api_key and store.get_api_key(provider) is None:
        api_key = settings.api_key
    return generator_cls(
        store=store,
        registry=build_default_registry(),
        provider=provider,
        api_key=api_key,
        model=model or settings.model,
        locale=locale or settings.locale,
        classifier=ErrorClassifier.from_settings(settings),
        max_auto_retries=settings.max_auto_retries,
        session_logger=SessionLogger(enabled=settings.log_sessions),
    )


def _enable_prompt_logs(log_prompts: bool) -> None:
    from mise.config import settings
    from mise.llm.prompt_logger import enable_prompt_logging

    if log_prompts or settings.log_prompts:
        enable_prompt_logging(True)
        console.print("[dim]📝 Prompt logging enabled. Check prompt_logs/ after the run.[/dim]")


# =============================================================================
# Rendering
# =============================================================================


def _is_key(text: str) -> bool:
    return text.startswith("errors.")


def _print_error(error: APIError, generator) -> None:
    lines = [f"[bold]{error.icon} {error.code.value.replace('_', ' ').title()}[/bold]"]
    if error.code == ErrorCode.PROMPT_INJECTION:
        lines.append(generator.guardrail.get_redirect_message(generator.locale))
    elif not _is_key(error.message):
        lines.append(error.message)
    if error.solutions:
        lines.append("")
        lines.extend(f"• {s}" for s in error.solutions)
    if error.free_alternatives:
        lines.append("\n[bold]Free alternatives:[/bold]")
        for alt in error.free_alternatives:
            provider_id = alt.action.split(":", 1)[-1]
            lines.append(f"  {alt.provider} [dim]({alt.url}) → mise cook -p {provider_id}[/dim]")
    if error.action == "show-api-key-form":
        lines.append("\n[dim]Save a key with: mise key <provider> <key>[/dim]")
    console.print(Panel("\n".join(lines), border_style="red", title="Error"))


def _render(generator):
    """Renderable for the live view, from the generator's current state."""
    status = generator.status
    pending = generator.pending_retry
    if pending is not None:
        return Spinner(
            "dots",
            text=f"{pending.code.replace('_', ' ').lower()}: retrying in {pending.remaining:.0f}s "
            f"(retry {pending.retry})",
        )
    if status.state == "validating":
        return Spinner("dots", text=status.message)
    if status.state == "connecting":
        return Spinner("dots", text=f"Connecting to {status.provider}...")
    if status.state == "streaming":
        if status.content:
            return Markdown(status.content)
        return Spinner("dots", text=f"Receiving... {status.tokens} chars")
    return Spinner("dots", text="")


async def _drive(generator, request) -> None:
    """Run a request to its final state, following auto-retries, with a live view."""
    with Live(_render(generator), console=console, transient=True, refresh_per_second=8) as live:
        unsubscribe = generator.subscribe(lambda _status: live.update(_render(generator)))
        try:
            await generator.generate(request)
            while generator.pending_retry is not None or generator.is_generating:
                live.update(_render(generator))
                await asyncio.sleep(0.25)
        finally:
            unsubscribe()


def _run(generator, request) -> bool:
    """Returns False if the user interrupted."""
    try:
        asyncio.run(_drive(generator, request))
    except KeyboardInterrupt:
        generator.cancel()
        console.print("\n[dim]Cancelled.[/dim]")
        return False
    finally:
        log_path = generator.session_logger.close()
        if log_path:
            console.print(f"[dim]Session log: {log_path}[/dim]")
    return True


# =============================================================================
# Generation commands
# =============================================================================


@app.command()
def cook(
    prompt: str = typer.Argument(..., help="What you have and what you feel like"),
    provider: str | None = typer.Option(None, "--provider", "-p", help="Provider id (see `mise providers`)"),
    model: str | None = typer.Option(None, "--model", "-m", help="Model override"),
    api_key: str | None = typer.Option(None, "--api-key", help="Use this key instead of the saved one"),
    locale: str | None = typer.Option(None, "--locale", help="Response language: en or es"),
    log_prompts: bool = typer.Option(False, "--log-prompts", "-l", help="Log all prompts to prompt_logs/"),
) -> None:
    """Stream a recipe."""
    from mise.generation import RecipeGenerator, RecipeRequest

    _enable_prompt_logs(log_prompts)
    generator = _build(RecipeGenerator, provider, model, api_key, locale)
    if not _run(generator, RecipeRequest(prompt=prompt)):
        raise typer.Exit(130)

    status = generator.status
    if status.state == "error":
        _print_error(status.error, generator)
        raise typer.Exit(1)
    if status.state == "completed":
        console.print(Markdown(status.content))
        console.print(f"\n[dim]{generator.provider} · {status.duration:.1f}s[/dim]")
        if generator.last_recipe:
            console.print(f"[dim]Saved to history as {generator.last_recipe.id}[/dim]")


@app.command()
def ideas(
    ingredients: str = typer.Argument(..., help="Comma-separated ingredients"),
    meal: MealType | None = typer.Option(None, "--meal", help="Meal type"),
    vibe: list[str] = typer.Option([], "--vibe", help="Preference tag (repeatable)"),
    servings: int = typer.Option(2, "--servings", "-s", min=1),
    provider: str | None = typer.Option(None, "--provider", "-p"),
    model: str | None = typer.Option(None, "--model", "-m"),
    api_key: str | None = typer.Option(None, "--api-key"),
    locale: str | None = typer.Option(None, "--locale"),
    log_prompts: bool = typer.Option(False, "--log-prompts", "-l"),
) -> None:
    """Generate recipe ideas and save them."""
    from mise.generation import IdeasGenerator, IdeasRequest

    _enable_prompt_logs(log_prompts)
    generator = _build(IdeasGenerator, provider, model, api_key, locale)
    request = IdeasRequest(ingredients=ingredients, meal_type=meal, vibes=list(vibe), servings=servings)
    if not _run(generator, request):
        raise typer.Exit(130)

    status = generator.status
    if status.state == "error":
        _print_error(status.error, generator)
        raise typer.Exit(1)
    if generator.notice is not None:
        console.print(f"[yellow]{generator.notice.icon} No usable ideas came back. Try other ingredients.[/yellow]")
        return
    _print_ideas(generator.ideas)


def _print_ideas(items) -> None:
    table = Table(show_lines=False)
    table.add_column("Title", style="bold")
    table.add_column("Meal")
    table.add_column("Protein")
    table.add_column("Description")
    for idea in items:
        title = f"[dim]{idea.title}[/dim]" if idea.is_used else idea.title
        table.add_row(title, idea.meal_type.value, idea.protein_type.value, idea.description)
    console.print(table)
    console.print(f"[dim]{len(items)} ideas[/dim]")


# =============================================================================
# Saved data
# =============================================================================


@app.command()
def saved(
    meal: MealType | None = typer.Option(None, "--meal"),
    protein: ProteinType | None = typer.Option(None, "--protein"),
    unused: bool = typer.Option(False, "--unused", help="Only ideas not cooked yet"),
    vibe: list[str] = typer.Option([], "--vibe"),
) -> None:
    """List saved recipe ideas."""
    store = _get_store()
    items = store.filter_ideas(
        meal_type=meal,
        protein_type=protein,
        is_used=False if unused else None,
        vibes=list(vibe) or None,
    )
    if not items:
        console.print("[dim]No saved ideas match.[/dim]")
        return
    _print_ideas(items)


@app.command()
def history(
    remove: str | None = typer.Option(None, "--remove", help="Recipe id to delete"),
) -> None:
    """Show recipe history."""
    store = _get_store()
    if remove:
        store.remove_from_history(remove)
        console.print(f"Removed {remove}")
        return

    recipes = store.get_history()
    if not recipes:
        console.print("[dim]No recipes yet. Try `mise cook`.[/dim]")
        return
    table = Table()
    table.add_column("Id", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Time")
    table.add_column("Provider")
    for recipe in recipes:
        table.add_row(recipe.id, recipe.title, f"{recipe.prep_time + recipe.cook_time} min", recipe.provider)
    console.print(table)


@app.command()
def shopping(
    add_recipe: str | None = typer.Option(None, "--add-recipe", help="Add a history recipe's ingredients"),
    remove: int | None = typer.Option(None, "--remove", help="Remove a raw line by index"),
    clear: bool = typer.Option(False, "--clear"),
) -> None:
    """Show the consolidated shopping list."""
    from mise.parsing import consolidate_ingredients

    store = _get_store()
    if clear:
        store.clear_shopping_list()
        console.print("Shopping list cleared.")
        return
    if remove is not None:
        store.remove_from_shopping_list(remove)
    if add_recipe:
        recipe = next((r for r in store.get_history() if r.id == add_recipe), None)
        if recipe is None:
            console.print(f"[red]No recipe {add_recipe} in history.[/red]")
            raise typer.Exit(1)
        store.add_to_shopping_list(
            [
                Ingredient(
                    name=i.name,
                    amount=i.amount,
                    is_allergen=i.is_allergen,
                    recipe_title=recipe.title,
                )
                for i in recipe.ingredients
            ]
        )

    lines = consolidate_ingredients(store.get_shopping_list())
    if not lines:
        console.print("[dim]Shopping list is empty.[/dim]")
        return
    table = Table()
    table.add_column("Ingredient", style="bold")
    table.add_column("Amount")
    table.add_column("For", style="dim")
    for line in lines:
        name = f"⚠️ {line.name}" if line.is_allergen else line.name
        table.add_row(name, line.amount, ", ".join(line.sources))
    console.print(table)


@app.command()
def pantry(
    items: list[str] | None = typer.Argument(None, help="Staples you always have"),
    clear: bool = typer.Option(False, "--clear"),
) -> None:
    """Show or replace pantry staples."""
    store = _get_store()
    if clear:
        store.set_pantry([])
    elif items:
        store.set_pantry(items)
    current = store.get_pantry()
    console.print(", ".join(current) if current else "[dim]Pantry is empty.[/dim]")


# =============================================================================
# Providers & credentials
# =============================================================================


@app.command()
def providers() -> None:
    """List available providers."""
    from mise.llm.registry import build_default_registry

    store = _get_store()
    registry = build_default_registry()
    recommended = registry.recommended_provider()

    table = Table()
    table.add_column("Id")
    table.add_column("Name", style="bold")
    table.add_column("Free")
    table.add_column("Key")
    table.add_column("Default model", style="dim")
    for config in registry.all_providers():
        name = f"{config.name} ⭐" if recommended and config.id == recommended.id else config.name
        table.add_row(
            config.id,
            name,
            "✅" if config.is_free else "",
            "🔑" if store.get_api_key(config.id) else "",
            config.default_model,
        )
    console.print(table)


@app.command()
def key(
    provider: str = typer.Argument(..., help="Provider id"),
    value: str | None = typer.Argument(None, help="API key"),
    model: str | None = typer.Option(None, "--model", "-m", help="Preferred model for this provider"),
    remove: bool = typer.Option(False, "--remove"),
) -> None:
    """Save or remove a provider API key."""
    from mise.llm.providers import PROVIDERS

    if provider not in PROVIDERS:
        console.print(f"[red]Unknown provider '{provider}'. See `mise providers`.[/red]")
        raise typer.Exit(1)

    store = _get_store()
    if remove:
        store.remove_api_key(provider)
        console.print(f"Removed key for {provider}")
        return
    if not value:
        value = typer.prompt(f"{PROVIDERS[provider].name} API key", hide_input=True)
    store.set_api_key(provider, value.strip(), selected_model=model)
    store.set_last_provider(provider)
    console.print(f"✅ Key saved for {PROVIDERS[provider].name}")


@app.command()
def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete everything mise has stored."""
    if not yes:
        typer.confirm("Delete profile, keys, history, ideas and lists?", abort=True)
    _get_store().clear_all()
    console.print("All stored data removed.")


# =============================================================================
# Diagnostics
# =============================================================================


@app.command()
def health() -> None:
    """Check configuration and local storage."""
    from mise.config import get_settings
    from mise.llm.providers import PROVIDERS

    console.print("\n[bold]Mise Health Check[/bold]\n")

    try:
        settings = get_settings()
        console.print("✅ Configuration loaded")
        console.print(f"   Environment: {settings.env}")
        console.print(f"   Log level: {settings.log_level}")
        console.print(f"   Data: {settings.store_path}")

        if settings.default_provider in PROVIDERS:
            console.print(f"✅ Default provider: {settings.default_provider}")
        else:
            console.print(f"❌ Unknown default provider '{settings.default_provider}'")

        store = _get_store()
        saved_keys = [k.provider for k in store.get_api_keys()]
        if saved_keys or settings.api_key:
            console.print(f"✅ API keys: {', '.join(saved_keys) or 'from MISE_API_KEY'}")
        else:
            console.print("⚠️  No API key saved. Run `mise key <provider> <key>`")

        console.print("\n[green]All checks passed![/green]")

    except Exception as e:
        console.print(f"\n[red]❌ Configuration error: {e}[/red]")
        console.print("[dim]Check your MISE_* environment variables or .env file.[/dim]")
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from mise import __version__

    console.print(f"Mise version {__version__}")


if __name__ == "__main__":
    app()
