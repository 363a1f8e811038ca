import logging
from gettext import gettext as _
from pathlib import Path

logger = logging.getLogger(__name__)

COMMAND_DESCRIPTION = _("Print a stored project as JSON")


def command(subparser):
    subparser.add_argument(
        "store_dir", type=Path, help=_("Directory holding the projects")
    )
    subparser.add_argument("project", type=str, help=_("Project id"))
    subparser.add_argument(
        "--indent", type=int, default=2, help=_("JSON indentation")
    )

    def handle(args):
        import asyncio
        import json

        from point_marker.core.sync import JsonFileRemoteStore

        assert args.store_dir.is_dir(), _("Store directory must exist")
        store = JsonFileRemoteStore(args.store_dir)

        async def collect():
            metadata = await store.get_project_metadata(args.project)
            if metadata is None:
                return None
            points = await store.list_points(args.project)
            areas = await store.list_areas(args.project)
            return dict(
                project=args.project,
                metadata=metadata.to_dict(),
                points=[p.to_dict() for p in points],
                areas=[a.to_dict() for a in areas],
            )

        data = asyncio.run(collect())
        if data is None:
            logger.error(
                _("Project {project} not found in {store_dir}").format(
                    project=args.project, store_dir=args.store_dir
                )
            )
            known = store.list_projects()
            if known:
                logger.info(_("Known projects: {projects}").format(projects=", ".join(known)))
            raise SystemExit(1)
        print(json.dumps(data, indent=args.indent, ensure_ascii=False))

    return handle
