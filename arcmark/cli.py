import click


@click.group()
@click.option(
    "--data-root",
    default=None,
    type=click.Path(file_okay=False),
    help="State directory (default: from ARCMARK_DATA_ROOT or ~/.arcmark).",
)
@click.pass_context
def main(ctx: click.Context, data_root: str | None) -> None:
    """Arcmark - Workspace-organised bookmarks."""
    from arcmark.core.log import setup_logging
    from arcmark.core.settings import get_settings

    settings = get_settings()
    setup_logging(settings.log_level)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["data_root"] = data_root or settings.data_root


def _model(ctx: click.Context):
    """Build the ``AppModel`` over the selected data root (once per invocation)."""
    from arcmark.core.managers import AppModel
    from arcmark.core.store import LocalStateStore

    if "model" not in ctx.obj:
        store = LocalStateStore(ctx.obj["data_root"])
        ctx.obj["store"] = store
        ctx.obj["model"] = AppModel(store)
    return ctx.obj["model"]


def _echo_forest(nodes, depth: int = 0) -> None:
    from arcmark.core.models import FolderNode

    indent = "  " * depth
    for node in nodes:
        if isinstance(node, FolderNode):
            marker = "v" if node.folder.is_expanded else ">"
            click.echo(f"{indent}{marker} {node.folder.name}/")
            _echo_forest(node.folder.children, depth + 1)
        else:
            click.echo(f"{indent}- {node.link.title}  <{node.link.url}>")


# ---------------------------------------------------------------------------
# Browsing
# ---------------------------------------------------------------------------


@main.command()
@click.pass_context
def workspaces(ctx: click.Context) -> None:
    """List workspaces; the selected one is marked with '*'."""
    model = _model(ctx)
    current_id = model.current_workspace.id
    for workspace in model.workspaces:
        marker = "*" if workspace.id == current_id else " "
        color = workspace.color_id
        click.echo(f"{marker} {workspace.name} [{color.display_name} {color.hex}] {workspace.id}")


@main.command()
@click.option("--query", "-q", default="", help="Only show links whose title contains this text.")
@click.pass_context
def show(ctx: click.Context, query: str) -> None:
    """Print the current workspace's pinned links and bookmark tree."""
    model = _model(ctx)
    workspace = model.current_workspace
    click.echo(f"{workspace.name}")
    for link in workspace.pinned_links:
        click.echo(f"* {link.title}  <{link.url}>")
    _echo_forest(model.filtered_items(query))


@main.command()
@click.argument("workspace_name")
@click.pass_context
def select(ctx: click.Context, workspace_name: str) -> None:
    """Select the workspace with the given name."""
    model = _model(ctx)
    for workspace in model.workspaces:
        if workspace.name == workspace_name:
            model.select_workspace(workspace.id)
            click.echo(f"Selected {workspace.name}.")
            return
    raise click.ClickException(f"No workspace named {workspace_name!r}")


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------


@main.command("add-link")
@click.argument("url")
@click.option("--title", default=None, help="Link title (default: the URL's host).")
@click.pass_context
def add_link(ctx: click.Context, url: str, title: str | None) -> None:
    """Append a link to the current workspace."""
    model = _model(ctx)
    result = model.add_link(url, title)
    click.echo(f"Added {result.id}.")


@main.command("create-workspace")
@click.argument("name")
@click.pass_context
def create_workspace(ctx: click.Context, name: str) -> None:
    """Create a workspace with a random colour and select it."""
    from arcmark.core.models import WorkspaceColorId

    model = _model(ctx)
    result = model.create_workspace(name, WorkspaceColorId.random())
    click.echo(f"Created workspace {name} ({result.id}).")


@main.command("import-arc")
@click.argument("path", type=click.Path(dir_okay=False))
@click.pass_context
def import_arc(ctx: click.Context, path: str) -> None:
    """Import pinned bookmarks from Arc's StorableSidebar.json."""
    import anyio

    from arcmark.core.importers import ArcImportError, import_arc_file

    model = _model(ctx)
    try:
        result = anyio.run(import_arc_file, path)
    except ArcImportError as exc:
        raise click.ClickException(str(exc)) from None

    model.import_workspaces(result)
    click.echo(
        f"Imported {result.workspaces_created} workspace(s), "
        f"{result.links_imported} link(s), {result.folders_imported} folder(s)."
    )


@main.command()
@click.pass_context
def refresh(ctx: click.Context) -> None:
    """Fetch favicons and page titles for the current workspace's links."""
    import anyio
    import httpx

    from arcmark.core.services import LinkMetadataRefresher

    model = _model(ctx)

    async def run() -> int:
        async with httpx.AsyncClient() as client:
            refresher = LinkMetadataRefresher.create(model, ctx.obj["store"], client, ctx.obj["settings"])
            return await refresher.refresh_workspace()

    changed = anyio.run(run)
    click.echo(f"Applied {changed} change(s).")


if __name__ == "__main__":
    main()
