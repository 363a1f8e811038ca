import logging
from gettext import gettext as _
from pathlib import Path

logger = logging.getLogger(__name__)

COMMAND_DESCRIPTION = _("Draw a stored project onto its image")


def command(subparser):
    subparser.add_argument(
        "store_dir", type=Path, help=_("Directory holding the projects")
    )
    subparser.add_argument(
        "image", type=Path, help=_("Image file; its stem is the project id")
    )
    subparser.add_argument("output", type=Path, help=_("Where to save the rendering"))
    subparser.add_argument(
        "--point-size", type=float, default=6, help=_("Point marker radius")
    )
    subparser.add_argument(
        "--fill-alpha", type=float, default=0.3, help=_("Area fill opacity")
    )

    def handle(args):
        import asyncio

        import cv2

        from point_marker.config import get_config
        from point_marker.core.canvas import CanvasSession
        from point_marker.core.sync import JsonFileRemoteStore
        from point_marker.interfaces import RenderAdapter

        assert args.store_dir.is_dir(), _("Store directory must exist")
        image = cv2.imread(str(args.image))
        assert image is not None, _("Could not read image {image}").format(
            image=args.image
        )
        image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        height, width = image.shape[:2]

        session = CanvasSession.from_config(
            get_config(), width, height, remote=JsonFileRemoteStore(args.store_dir)
        )
        result = asyncio.run(session.open_image(args.image.stem, width, height))
        if result.failed:
            raise SystemExit(1)
        logger.info(
            _("Rendering {points} points and {areas} areas").format(
                points=result.points, areas=result.areas
            )
        )

        adapter = RenderAdapter(
            session, point_size=args.point_size, fill_alpha=args.fill_alpha
        )
        vis = adapter.get_visualization(image)
        args.output.parent.mkdir(exist_ok=True, parents=True)
        cv2.imwrite(str(args.output), cv2.cvtColor(vis, cv2.COLOR_RGB2BGR))

    return handle
