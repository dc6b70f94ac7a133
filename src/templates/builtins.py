# src/templates/builtins.py — v1
"""Built-in markdown layouts, addressable by name."""

from __future__ import annotations

DEFAULT_TEMPLATE = """---
source: {{filename}}
type: {{type}}
{{#if subject}}subject: "{{subject}}"
{{/if}}{{#if category}}category: [{{category}}]
{{/if}}{{#if style}}style: [{{style}}]
{{/if}}{{#if mood}}mood: [{{mood}}]
{{/if}}{{#if medium}}medium: {{medium}}
{{/if}}{{#if composition}}composition: [{{composition}}]
{{/if}}{{#if palette}}palette: [{{palette}}]
{{/if}}{{#if colors}}colors: [{{colors}}]
{{/if}}{{#if tags}}tags: [{{tags}}]
{{/if}}{{#if note}}note: "{{note}}"
{{/if}}model: {{model}}
processed: {{processedDate}}
---

{{description}}

{{#if extractedText}}
## Extracted Text

{{extractedText}}
{{/if}}
"""

MINIMAL_TEMPLATE = """{{description}}

Source: [{{filename}}]({{sourcePath}})
"""

ALT_TEXT_TEMPLATE = """{{description}}
"""

DETAILED_TEMPLATE = """---
source: {{filename}}
type: {{type}}
{{#if subject}}subject: "{{subject}}"
{{/if}}{{#if category}}category: [{{category}}]
{{/if}}{{#if style}}style: [{{style}}]
{{/if}}{{#if mood}}mood: [{{mood}}]
{{/if}}{{#if medium}}medium: {{medium}}
{{/if}}{{#if composition}}composition: [{{composition}}]
{{/if}}{{#if palette}}palette: [{{palette}}]
{{/if}}{{#if colors}}colors: [{{colors}}]
{{/if}}{{#if tags}}tags: [{{tags}}]
{{/if}}format: {{format}}
dimensions: {{dimensions}}
sizeBytes: {{sizeBytes}}
sha256: {{sha256}}
model: {{model}}
processed: {{datetime}}
---

# {{basename}}

![{{basename}}]({{sourcePath}})

| Property | Value |
|----------|-------|
| File | {{filename}} |
| Format | {{format}} |
| Dimensions | {{dimensions}} |
| Size | {{sizeHuman}} |
| Processed | {{processedDate}} |
| Model | {{model}} |

## Description

{{description}}

{{#if extractedText}}
## Extracted Text

{{extractedText}}
{{/if}}
"""

BUILTIN_TEMPLATES: dict[str, str] = {
    "default": DEFAULT_TEMPLATE,
    "minimal": MINIMAL_TEMPLATE,
    "alt-text": ALT_TEXT_TEMPLATE,
    "detailed": DETAILED_TEMPLATE,
}
