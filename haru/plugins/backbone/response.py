import ast

from haru.core.plugin import Plugin
from haru.openapi import Reference, Response
from haru.plugins.backbone.type_schema import TypeSchemaProcessor
from haru.plugins.backbone.utils import is_success_code, select_media_type
from haru.utils.dependencies import DependencyManager


class EndpointMethodResponseProcessor:
    """Candidate return types contributed by one entry of a response map.

    Only successful (2xx) responses carrying a content schema contribute;
    every other entry yields no candidates.
    """

    def __init__(
        self,
        code: str,
        response: Response | Reference,
        dependencies: DependencyManager,
        owner: Plugin,
    ):
        self.code = code
        self.response = response
        self.dependencies = dependencies
        self.owner = owner

    def process(self) -> list[ast.expr]:
        if not is_success_code(self.code):
            return []

        response = self.owner.resolver.resolve(self.response)
        media_type = select_media_type(response.content)
        if media_type is None or media_type.schema_ is None:
            return []

        return TypeSchemaProcessor(
            media_type.schema_, self.dependencies, self.owner.resolver
        ).process()
