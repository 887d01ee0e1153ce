import knime.extension as knext

main_category = knext.category(
    path="/community",
    level_id="perceptualmapping",
    name="Perceptual Mapping",
    description="Nodes for positioning brands and attributes on perceptual maps built from survey ratings",
    icon="icons/icon.png",
)

# Node modules register themselves on import and use main_category
import nodes.perceptual_map_learner  # noqa: E402,F401
