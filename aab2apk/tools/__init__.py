"""External tools driven by the step: bundletool, unzip and envman."""
