from switchboard.application.pipelines import (
    CompletionInput,
    CompletionPipeline,
    ImageInput,
    TextExtractionPipeline,
)

__all__ = [
    "CompletionInput",
    "CompletionPipeline",
    "ImageInput",
    "TextExtractionPipeline",
]
