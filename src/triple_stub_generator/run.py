"""Top-level module for context generation."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from google.protobuf.compiler import plugin_pb2
from google.protobuf.message import DecodeError

from triple_stub_generator import descriptors, helper
from triple_stub_generator.builder import build_context
from triple_stub_generator.context_dto import FileContext
from triple_stub_generator.errors import ConfigurationError, GenerationError, OptionsError
from triple_stub_generator.index import DescriptorIndex
from triple_stub_generator.schema_types import SchemaFile

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_SUFFIX = ".triple.json"
RESERVED_ALIASES_SEPARATOR = ":"


@dataclass(frozen=True)
class Options:
    """Options of a generation run.

    Attributes:
        reserved_aliases: Names that no import alias may take.
        output_suffix: Suffix of the artifacts that the plugin returns, replacing the schema extension.
        files: Paths of the files to generate from a descriptor set. If empty, every file with
            services is generated. Plugin runs always generate the files the compiler requests.
    """

    reserved_aliases: tuple[str, ...] = ()
    output_suffix: str = DEFAULT_OUTPUT_SUFFIX
    files: tuple[str, ...] = ()

    @classmethod
    def from_parameter(cls, parameter: str) -> Options:
        """Create options from a plugin parameter string, e.g. `reserve=context:http,suffix=.ctx.json`.

        Args:
            parameter (str): The parameter string of a code generator request.

        Raises:
            OptionsError: If the parameter string contains unknown or empty options.

        Returns:
            Options: The options.
        """
        params = helper.parse_parameters(parameter)

        unknown = sorted(set(params) - {"reserve", "suffix"})
        if unknown:
            raise OptionsError(f"unknown plugin parameter(s): {', '.join(unknown)}")

        if "suffix" in params and not params["suffix"]:
            raise OptionsError("the 'suffix' parameter needs a value")

        reserved = params.get("reserve", "").split(RESERVED_ALIASES_SEPARATOR)
        return cls(
            reserved_aliases=tuple(name for name in reserved if name),
            output_suffix=params.get("suffix", DEFAULT_OUTPUT_SUFFIX),
        )


def output_name(path: str, suffix: str = DEFAULT_OUTPUT_SUFFIX) -> str:
    """The name of the artifact generated for a schema file.

    For example, `shop/orders.proto` becomes `shop/orders.triple.json`.
    """
    return helper.strip_extension(path) + suffix


def _select_files(files: Sequence[SchemaFile], files_to_generate: Iterable[str] | None) -> list[SchemaFile]:
    """Pick the files to generate contexts for.

    Args:
        files (Sequence[SchemaFile]): All files of the compilation unit.
        files_to_generate (Iterable[str] | None): The requested paths, or None for all files.

    Raises:
        GenerationError: If a requested path is not part of the compilation unit.

    Returns:
        list[SchemaFile]: The selected files that declare services, in request order.
    """
    if files_to_generate is None:
        candidates = list(files)
    else:
        files_to_generate = list(files_to_generate)
        by_path = {schema_file.path: schema_file for schema_file in files}
        missing = [path for path in files_to_generate if path not in by_path]
        if missing:
            raise GenerationError(
                [ConfigurationError(path, "was not provided to the generator") for path in missing]
            )
        candidates = [by_path[path] for path in files_to_generate]

    selected: list[SchemaFile] = []
    for schema_file in candidates:
        # Skip files that don't contain any service definitions
        if not schema_file.has_services:
            logger.info("Skipping '%s', it declares no services.", schema_file.path)
            continue
        selected.append(schema_file)

    return selected


def generate_contexts(
    files: Sequence[SchemaFile],
    files_to_generate: Iterable[str] | None = None,
    reserved_aliases: Iterable[str] = (),
) -> list[FileContext]:
    """Entry-point for building the contexts of several files of one compilation unit.

    The index of the compilation unit is built once and shared. A file that fails does not stop
    the others; all failures are reported together after every file was processed.

    Args:
        files (Sequence[SchemaFile]): All files of the compilation unit, including dependencies.
        files_to_generate (Iterable[str] | None, optional): Paths to generate. Defaults to None, meaning all files.
        reserved_aliases (Iterable[str], optional): Names that no import alias may take. Defaults to ().

    Raises:
        GenerationError: If at least one file could not be processed.

    Returns:
        list[FileContext]: The contexts, in the order of the generated files.
    """
    index = DescriptorIndex.build(files)
    reserved_aliases = tuple(reserved_aliases)

    contexts: list[FileContext] = []
    errors: list[ConfigurationError] = []

    for schema_file in _select_files(files, files_to_generate):
        try:
            contexts.append(build_context(schema_file, index, reserved_aliases))
        except ConfigurationError as e:
            logger.error("Failed to process '%s': %s", schema_file.path, e.message)
            errors.append(e)

    if errors:
        raise GenerationError(errors, contexts)

    return contexts


def dumps_contexts(contexts: Iterable[FileContext]) -> str:
    """Serialize contexts to a JSON array."""
    return json.dumps([context.to_dict() for context in contexts], indent=2)


def run_plugin(request: plugin_pb2.CodeGeneratorRequest) -> plugin_pb2.CodeGeneratorResponse:
    """Answer a code generator request with one JSON context artifact per generated file.

    Failures are reported through the `error` field of the response, as the compiler expects.

    Args:
        request (plugin_pb2.CodeGeneratorRequest): The request of the schema compiler.

    Returns:
        plugin_pb2.CodeGeneratorResponse: The response.
    """
    response = plugin_pb2.CodeGeneratorResponse()
    response.supported_features = plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL

    try:
        options = Options.from_parameter(request.parameter)
        files = descriptors.compilation_unit_from_protos(request.proto_file)
        contexts = generate_contexts(files, list(request.file_to_generate), options.reserved_aliases)
    except (OptionsError, GenerationError) as e:
        response.error = str(e)
        return response

    for context in contexts:
        generated = response.file.add()
        generated.name = output_name(context.source, options.output_suffix)
        generated.content = json.dumps(context.to_dict(), indent=2)

    logger.info("Generated %d context file(s).", len(contexts))
    return response


def run(args: argparse.Namespace) -> int:
    """Run the generator, either as a compiler plugin or on a descriptor set file.

    Without `args.input`, a code generator request is read from stdin and the response is written
    to stdout. Otherwise the descriptor set at `args.input` is read and the contexts are written as
    JSON to `args.output`, or to stdout.

    Args:
        args (argparse.Namespace): The arguments that were passed when calling the generator.

    Returns:
        int: Error code.
    """
    input_path: str = getattr(args, "input", "")
    output_path: str = getattr(args, "output", "")

    if not input_path:
        request = descriptors.parse_request(sys.stdin.buffer.read())
        response = run_plugin(request)
        sys.stdout.buffer.write(response.SerializeToString())
        return 0

    options = Options(
        reserved_aliases=tuple(getattr(args, "reserve", [])),
        files=tuple(getattr(args, "files", [])),
    )

    try:
        descriptor_set = descriptors.parse_descriptor_set(Path(input_path).read_bytes())
    except OSError as e:
        logger.error("Could not read descriptor set '%s': %s", input_path, e)
        return 1
    except DecodeError as e:
        logger.error("'%s' is not a serialized FileDescriptorSet: %s", input_path, e)
        return 1

    files = descriptors.compilation_unit_from_protos(descriptor_set.file)

    try:
        contexts = generate_contexts(files, options.files or None, options.reserved_aliases)
    except GenerationError as e:
        logger.error(str(e))
        return 1

    output = dumps_contexts(contexts)

    if output_path:
        Path(output_path).write_text(output + "\n", encoding="utf8")
        logger.info("Wrote %d context(s) to '%s'.", len(contexts), output_path)
    else:
        sys.stdout.write(output + "\n")

    return 0
