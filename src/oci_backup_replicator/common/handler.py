import io
import json
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, Type, TypeVar, Union

import marshmallow as mm
from aibs_informatics_core.models.base import SchemaModel
from fdk import response

from oci_backup_replicator.common.logging import LoggingMixins
from oci_backup_replicator.common.models import InvocationContext
from oci_backup_replicator.exceptions import MalformedEventError

FunctionBody = Union[bytes, str, io.BytesIO, None]
FunctionHandlerType = Callable[[Any, FunctionBody], response.Response]

TEXT_CONTENT_TYPE = "text/plain"

REQUEST = TypeVar("REQUEST", bound=SchemaModel)


@dataclass  # type: ignore[misc] # mypy #5374
class FunctionHandler(LoggingMixins, Generic[REQUEST]):
    """Base class for creating strongly-typed OCI Functions handlers.

    Provides a foundation for functions with built-in support for:
    - Strict request deserialization from the raw invocation body
    - Structured logging via AWS Lambda Powertools
    - A plain-text acknowledgement on success and no output on failure

    Inherit from the FunctionHandler class to create a custom handler that
    expects a REQUEST object following the `SchemaModel` protocol and returns
    the text to write to the invocation's output, or None to write nothing.

    Type Parameters:
        REQUEST: The request model type.

    Example:
        ```python
        @dataclass
        class MyRequest(SchemaModel):
            name: str = custom_field(mm_field=StringField())

        class MyHandler(FunctionHandler[MyRequest]):
            def handle(self, request: MyRequest) -> Optional[str]:
                return f"Hello, {request.name}!"

        handler = MyHandler.get_handler()
        ```
    """

    @classmethod
    def get_request_cls(cls) -> Type[REQUEST]:
        for base in getattr(cls, "__orig_bases__", ()):
            args = getattr(base, "__args__", ())
            if args and isinstance(args[0], type) and issubclass(args[0], SchemaModel):
                return args[0]
        for parent in cls.__mro__[1:]:
            if issubclass(parent, FunctionHandler) and parent is not FunctionHandler:
                return parent.get_request_cls()
        raise TypeError(f"{cls.__name__} does not declare a request model")

    @classmethod
    def deserialize_request(cls, data: FunctionBody) -> REQUEST:
        """Strictly decode the raw invocation body into the request model.

        A valid JSON object with missing fields is accepted; everything that
        cannot be parsed at all is rejected.

        Args:
            data (FunctionBody): The raw invocation body.

        Raises:
            MalformedEventError: If the body is empty, not JSON, not an object, or invalid.

        Returns:
            The request object.
        """
        if isinstance(data, io.BytesIO):
            data = data.getvalue()
        if isinstance(data, bytes):
            try:
                data = data.decode("utf-8")
            except UnicodeDecodeError as e:
                raise MalformedEventError(f"Invocation body is not valid UTF-8: {e}") from e
        if not data or not data.strip():
            raise MalformedEventError("Invocation body is empty")
        try:
            document = json.loads(data)
        except json.JSONDecodeError as e:
            raise MalformedEventError(f"Invocation body is not valid JSON: {e}") from e
        if not isinstance(document, dict):
            raise MalformedEventError(
                f"Invocation body must be a JSON object, got {type(document).__name__}"
            )
        try:
            return cls.get_request_cls().from_dict(document)
        except (mm.ValidationError, TypeError, ValueError) as e:
            raise MalformedEventError(f"Invocation body is not a valid event: {e}") from e

    def handle(self, request: REQUEST) -> Optional[str]:
        raise NotImplementedError("Please implement `handle` method")

    def invoke(self, data: FunctionBody, context: InvocationContext) -> Optional[str]:
        """Handle one invocation end to end.

        Any error is logged with its traceback and ends the invocation
        without output.

        Args:
            data (FunctionBody): The raw invocation body.
            context (InvocationContext): The context of the invocation.

        Returns:
            The text to write to the output, or None if nothing must be written.
        """
        self.context = context
        self.log.append_keys(call_id=context.call_id)
        try:
            request = self.deserialize_request(data)
            self.log.info("Event successfully deserialized. Calling handler...")
            output = self.handle(request=request)
        except Exception as e:
            self.log.exception(f"{self.handler_name()} failed: {e}")
            return None
        self.log.info(f"Handler completed and returned following output: {output!r}")
        return output

    # --------------------------------------------------------------------
    # Handler provider methods
    # --------------------------------------------------------------------

    @classmethod
    def get_handler(cls, *args, **kwargs) -> FunctionHandlerType:
        """Create an ``fdk`` handler function for this handler class.

        Creates a wrapped handler function that:
        - Builds the invocation context from the ``fdk`` context
        - Instantiates the handler class
        - Invokes it with the raw body
        - Returns the text output (empty on failure)

        Args:
            *args: Positional arguments passed to the handler constructor.
            **kwargs: Keyword arguments passed to the handler constructor.

        Returns:
            A callable suitable for ``fdk.handle``.

        Example:
            ```python
            # In func.py
            handler = MyHandler.get_handler()
            ```
        """

        logger = cls.get_logger(service=cls.service_name())

        def handler(ctx: Any, data: FunctionBody = None) -> response.Response:
            function_handler = cls(*args, **kwargs)  # type: ignore[call-arg]
            function_handler.log = logger
            function_handler.add_logger_to_root()

            output: Optional[str] = None
            try:
                context = InvocationContext.from_fdk_context(ctx)
            except Exception as e:
                logger.exception(f"Could not read the invocation context: {e}")
            else:
                output = function_handler.invoke(data, context)
            return response.Response(
                ctx,
                response_data=output or "",
                headers={"Content-Type": TEXT_CONTENT_TYPE},
            )

        return handler

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(request: {self.get_request_cls().__name__})"
