"""Method channel handler exposing the save-image operation to the host."""

from loguru import logger

from stargallery.domain.channel import MethodCall, MethodResponse
from stargallery.domain.save import SaveResult
from stargallery.saver.dispatcher import ImageSaver
from stargallery.saver.reporter import Reply, ResultReporter

SAVE_IMAGE = "saveImage"


class ImageSaverChannel:
    def __init__(
        self,
        *,
        name: str,
        saver: ImageSaver,
        reporter: ResultReporter | None = None,
    ) -> None:
        self.name = name
        self.saver = saver
        self.reporter = reporter or ResultReporter()

    async def handle(self, call: MethodCall) -> MethodResponse:
        """Handle one method call and wait for its single response."""
        reply = Reply()
        await self.on_method_call(call, reply)
        return await reply.wait()

    async def on_method_call(self, call: MethodCall, reply: Reply) -> None:
        if call.method != SAVE_IMAGE:
            logger.debug(f"Method {call.method} not implemented on {self.name}")
            reply.not_implemented()
            return

        path = call.argument("path")
        if not isinstance(path, str):
            path = None

        try:
            result = await self.saver.dispatch(path)
        except Exception as e:
            logger.exception(f"Unexpected error while saving {path}")
            result = SaveResult.save_failed(str(e))
        self.reporter.report(result, reply)

    def close(self) -> None:
        """Release the storage behind the channel."""
        self.saver.adapter.close()
