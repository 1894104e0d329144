"""SetupCommand for interactive export configuration.

This module implements the --setup command: it fetches the object snapshot,
asks how each content model should be written (markdown pages, JSON/YAML
data files, or not at all), compiles the answers into a rule set and saves
it to .content-files/config.yaml.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from rich.prompt import Confirm, Prompt
from rich.table import Table

from content_files.content_source.source_client import SourceClient
from content_files.file_writer.config_loader import ConfigLoader
from content_files.file_writer.errors import ConfigError, InvalidInputError
from content_files.file_writer.models import ExportConfig, FileFormat
from content_files.file_writer.rules import (
    DATA_EXTENSIONS,
    DataAnswers,
    PageAnswers,
    compile_answers,
)
from content_files.file_writer.slugify import SlugConverter
from content_files.models.content_object import ContentModel, ContentObject
from .errors import SetupError
from .output import OutputHandler

logger = logging.getLogger(__name__)

# ask(prompt, choices, default) -> answer
AskFunction = Callable[..., str]
# confirm(prompt, default) -> bool
ConfirmFunction = Callable[..., bool]

MODEL_TYPES = ["page", "data", "skip"]
LAYOUT_SOURCES = ["field", "static", "none"]
EXAMPLE_SLUG_LENGTH = 60


def example_field_values(model: ContentModel, objects: Sequence[ContentObject]) -> Dict[str, str]:
    """Find one example value for each of the model's fields.

    The first object of the model carrying a non-empty scalar value wins.

    Example:
        >>> example_field_values(post_model, snapshot.objects)
        {'title': 'Hello World', 'views': '12'}
    """
    examples: Dict[str, str] = {}

    for obj in objects:
        if not model.owns(obj):
            continue

        for field_name in model.field_names:
            if field_name in examples:
                continue

            value = obj.fields.get(field_name)
            if isinstance(value, bool):
                text = str(value).lower()
            elif isinstance(value, (int, float, str)):
                text = str(value).strip()
            else:
                continue

            if text:
                examples[field_name] = text

    return examples


class SetupCommand:
    """Handles interactive creation of the export configuration.

    Prompts are injectable so the wizard can be driven without a terminal.

    Example:
        >>> setup = SetupCommand()
        >>> config = setup.run(source="content.json")
        >>> len(config.rules)
        3
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        source_client: Optional[SourceClient] = None,
        output_handler: Optional[OutputHandler] = None,
        ask: Optional[AskFunction] = None,
        confirm: Optional[ConfirmFunction] = None,
    ):
        """Initialize the setup command.

        Args:
            config_path: Config file path (defaults to .content-files/config.yaml)
            source_client: SourceClient for fetching the snapshot (optional)
            output_handler: OutputHandler for terminal output (optional)
            ask: Text/choice prompt (defaults to a Rich prompt)
            confirm: Yes/no prompt (defaults to a Rich confirm)
        """
        self.config_path = config_path or ConfigLoader.DEFAULT_CONFIG_PATH
        self.source_client = source_client or SourceClient()
        self.output_handler = output_handler or OutputHandler()
        self.ask = ask or self._rich_ask
        self.confirm = confirm or self._rich_confirm

    def run(self, source: Optional[str] = None, output_dir: str = ".") -> ExportConfig:
        """Run the wizard and save the resulting configuration.

        Args:
            source: Snapshot path or URL (falls back to CONTENT_SOURCE_URL)
            output_dir: Output directory recorded in the configuration

        Returns:
            The saved ExportConfig

        Raises:
            SetupError: If the snapshot describes no models, no model is
                        selected, or the answers are incomplete
            FilesystemError: If the configuration cannot be written
        """
        snapshot = self.source_client.fetch(source)

        if not snapshot.models:
            raise SetupError(
                "The object snapshot describes no content models; "
                "add a 'models' list to configure the export"
            )

        page_models: List[ContentModel] = []
        data_models: List[ContentModel] = []

        self.output_handler.print("[bold]Choose a type for each of the following models:[/bold]")
        for model in snapshot.models:
            origin = " / ".join(part for part in (model.source, model.project_id) if part)
            label = f"{model.display_name} ({origin})" if origin else model.display_name
            model_type = self.ask(label, choices=MODEL_TYPES, default="page")
            if model_type == "page":
                page_models.append(model)
            elif model_type == "data":
                data_models.append(model)

        if not page_models and not data_models:
            raise SetupError("No models selected for export")

        pages = []
        for index, model in enumerate(page_models, start=1):
            self.output_handler.print(
                f"\nConfiguring page: [bold]{model.display_name}[/bold] "
                f"[italic green]({index} of {len(page_models)})[/italic green]"
            )
            pages.append(self._ask_page(model, example_field_values(model, snapshot.objects)))

        data = []
        for index, model in enumerate(data_models, start=1):
            self.output_handler.print(
                f"\nConfiguring data object: [bold]{model.display_name}[/bold] "
                f"[italic green]({index} of {len(data_models)})[/italic green]"
            )
            data.append(self._ask_data(model, example_field_values(model, snapshot.objects)))

        try:
            rules = compile_answers(pages, data)
        except ConfigError as e:
            raise SetupError(f"Incomplete answers: {e}")

        config = ExportConfig(output_dir=output_dir, source=source, rules=rules)
        ConfigLoader.save(self.config_path, config)
        logger.info(f"Saved {len(rules)} rule(s) to {self.config_path}")
        return config

    def _ask_page(self, model: ContentModel, examples: Dict[str, str]) -> PageAnswers:
        answers = PageAnswers(model=model)
        answers.page_type = self.ask(
            "What is the type of this page?",
            choices=["single", "collection"],
            default="collection",
        )

        if answers.page_type == "single":
            answers.file_name = self.ask(
                "Choose a location for this page",
                default=f"{model.model_name}.md",
            )
        else:
            directories = ["_posts"]
            if model.model_name != "posts":
                directories.append(f"_{model.model_name}")
            directories.append("other")

            directory = self.ask(
                "Choose the directory for this collection",
                choices=directories,
                default="_posts",
            )
            if directory == "other":
                directory = self.ask("Type the name of the collection")
            answers.directory = directory

            answers.use_date = self.confirm(
                f"Do you want to use the post date in the file name? "
                f"(e.g. '{directory}/2018-03-26-my-blog-post.md')",
                default=True,
            )
            answers.file_name_field = self._ask_field(
                model,
                "Choose a field to generate the file name from",
                self._slug_examples(examples),
            )

        layout_source = self.ask(
            "Where does the name of the template (i.e. layout) for this page come from?",
            choices=LAYOUT_SOURCES,
            default="none",
        )
        if layout_source == "field":
            answers.layout_source = layout_source
            answers.layout = self._ask_field(model, "Please select the layout field", examples)
        elif layout_source == "static":
            answers.layout_source = layout_source
            answers.layout = self.ask("Please insert the layout name")

        if self.confirm(
            "Does one of the fields hold the page's content? "
            "The other fields will be added to the frontmatter.",
            default=True,
        ):
            answers.content_field = self._ask_field(
                model,
                "Please select the field that contains the page's content",
                examples,
            )

        return answers

    def _ask_data(self, model: ContentModel, examples: Dict[str, str]) -> DataAnswers:
        answers = DataAnswers(model=model)
        answers.format = self.ask(
            "Choose a format for the file where the data objects will be stored",
            choices=[FileFormat.JSON.value, FileFormat.YAML.value],
            default=FileFormat.JSON.value,
        )

        default_location = f"_data/{model.model_name}.{DATA_EXTENSIONS[FileFormat(answers.format)]}"
        location = self.ask(
            f"Choose a location for the file ('default' is {default_location})",
            choices=["default", "field", "other"],
            default="default",
        )
        if location == "field":
            answers.file_name_field = self._ask_field(
                model,
                "Please select the field that contains the file location",
                examples,
            )
        elif location == "other":
            answers.file_name = self.ask(
                "Please insert the location for the file",
                default=default_location,
            )
        else:
            answers.file_name = default_location

        answers.is_multiple = self.confirm(
            f"Do you want to include multiple entries in the same file? "
            f"If so, multiple entries of {model.model_name} will be added as an "
            f"array to the file; if not, only one entry will be kept.",
            default=True,
        )
        return answers

    def _ask_field(self, model: ContentModel, prompt: str, examples: Dict[str, str]) -> str:
        if not model.field_names:
            raise SetupError(f"Model '{model.model_name}' has no fields to choose from")

        table = Table(show_header=True, header_style="bold")
        table.add_column("Field")
        table.add_column("Example", style="dim")
        for field_name in model.field_names:
            table.add_row(field_name, examples.get(field_name, ""))
        self.output_handler.console.print(table)

        return self.ask(prompt, choices=list(model.field_names), default=model.field_names[0])

    @staticmethod
    def _slug_examples(examples: Dict[str, str]) -> Dict[str, str]:
        slugs = {}
        for field_name, value in examples.items():
            try:
                slugs[field_name] = SlugConverter.slugify(value, max_length=EXAMPLE_SLUG_LENGTH)
            except InvalidInputError:
                continue
        return slugs

    def _rich_ask(self, prompt: str, choices: Optional[List[str]] = None, default: Any = None) -> str:
        kwargs: Dict[str, Any] = {"console": self.output_handler.console}
        if choices:
            kwargs["choices"] = choices
        if default is not None:
            kwargs["default"] = default
        return Prompt.ask(prompt, **kwargs)

    def _rich_confirm(self, prompt: str, default: bool = True) -> bool:
        return Confirm.ask(prompt, console=self.output_handler.console, default=default)
