"""
Signature Catalog: static reference data shared by every analyzer.

`SignatureCatalog` is immutable and safe to share across concurrent
classification runs. `DEFAULT_CATALOG` is built once at import time; pass a
different instance to `classify_image` to swap catalogs (e.g. in tests).
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SignatureCatalog:
    # Known AI generator names, matched case-insensitively as substrings
    generators: tuple[str, ...]
    # Broader keyword list for full-text and filename search (superset of generators)
    ai_keywords: tuple[str, ...]
    # IPTC digital source type identifiers that indicate AI involvement
    ai_source_types: tuple[str, ...]
    # C2PA action identifiers
    generation_actions: tuple[str, ...]
    enhancement_actions: tuple[str, ...]
    # Known AI software tokens; reference data only, every entry is already covered by `generators`
    ai_software: tuple[str, ...]
    # Type inference for the keyword passes
    generation_keywords: tuple[str, ...]
    search_enhancement_keywords: tuple[str, ...]
    filename_enhancement_keywords: tuple[str, ...]

    @property
    def any_ai_actions(self) -> tuple[str, ...]:
        return self.generation_actions + self.enhancement_actions

    def is_generator(self, keyword: str) -> bool:
        return keyword.lower() in self.generators


DEFAULT_CATALOG = SignatureCatalog(
    generators=(
        "chatgpt", "gpt-4", "gpt-4o", "openai", "openai api",
        "gemini", "google ai", "bard", "made with google ai",
        "midjourney", "dall-e", "dalle", "dall·e",
        "stable diffusion", "firefly", "adobe firefly",
        "leonardo ai", "runwayml", "replicate", "anthropic",
        "claude", "stability ai", "dreamstudio",
    ),
    ai_keywords=(
        # Generation terms
        "generated", "generate", "generating", "creation", "created", "create",
        "artificial", "synthetic", "ai-generated", "ai generated", "machine learning",
        "neural network", "deep learning", "algorithm", "algorithmic",
        # AI companies and models
        "openai", "chatgpt", "gpt-4", "gpt-4o", "gpt4", "dall-e", "dalle",
        "google ai", "gemini", "bard", "palm", "lamda",
        "anthropic", "claude", "sonnet", "haiku", "opus",
        "midjourney", "stable diffusion", "stability ai", "dreamstudio",
        "adobe firefly", "leonardo ai", "runway", "runwayml",
        "replicate", "hugging face", "diffusion", "latent",
        # Enhancement/editing terms
        "enhanced", "enhance", "enhancing", "upscaled", "upscale", "upscaling",
        "edited", "edit", "editing", "modified", "modify", "processed",
        "filtered", "filter", "converted", "convert", "transformed",
        "stylized", "stylize", "inpainted", "inpainting", "outpainting",
        # Provenance vocabulary
        "c2pa", "content credentials", "provenance", "trained algorithmic",
        "trainedAlgorithmicMedia", "algorithmicMedia", "digitalSourceType",
        "softwareAgent", "manifest", "assertion",
        # Specific AI tools and platforms
        "meta ai", "llama", "bing create", "copilot", "designer",
        "canva ai", "photoshop ai", "generative fill", "generative expand",
        "firefly", "sensei", "nightcafe", "artbreeder", "deepart",
        "starryai", "jasper art", "copy.ai", "writesonic",
    ),
    ai_source_types=(
        "http://cv.iptc.org/newscodes/digitalsourcetype/trainedAlgorithmicMedia",
        "trainedAlgorithmicMedia",
        "algorithmicMedia",
        "compositeWithTrainedAlgorithmicMedia",
    ),
    generation_actions=("c2pa.created", "c2pa.placed", "c2pa.generated"),
    enhancement_actions=("c2pa.converted", "c2pa.edited", "c2pa.enhanced", "c2pa.filtered"),
    ai_software=(
        "gpt-4o", "gpt-4", "openai", "chatgpt",
        "google ai", "gemini", "bard",
        "midjourney", "dall-e", "stable diffusion",
        "adobe firefly", "leonardo ai",
    ),
    generation_keywords=("generated", "created", "artificial", "synthetic"),
    search_enhancement_keywords=(
        "enhanced", "enhance", "edited", "modified", "converted", "processed", "filtered",
    ),
    filename_enhancement_keywords=(
        "enhanced", "enhance", "edited", "modified", "converted", "processed", "upscaled",
    ),
)
