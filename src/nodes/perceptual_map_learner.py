import logging
import knime.extension as knext
from util import utils as kutil
import perceptual_map_ext

LOGGER = logging.getLogger(__name__)


class MapStrategyOptions(knext.EnumParameterOptions):
    CLASSICAL_MDS = (
        "Classical MDS",
        "Brands are placed by classical multidimensional scaling of the distances between their standardized profiles. Attributes are placed by performance-weighted brand centroids, shifted towards or away from the ideal brand and spread apart by a light repulsion.",
    )
    PCA_BIPLOT = (
        "PCA Biplot",
        "Brands are scored on the first two principal components of the standardized profiles; attributes are drawn as component loadings scaled to the brand cloud.",
    )


class BrandPolicyOptions(knext.EnumParameterOptions):
    ALL_BRANDS = ("All brands", "Every brand, the ideal brand included.")
    EXCLUDE_IDEAL = (
        "All brands except the ideal",
        "Leave the ideal (benchmark) brand out. It is still projected onto the resulting scale or configuration.",
    )


class EigenSolverOptions(knext.EnumParameterOptions):
    POWER_ITERATION = (
        "Power iteration",
        "Two dominant eigenpairs by power iteration with deflation (fixed number of iterations).",
    )
    EXACT = (
        "Exact",
        "Two largest eigenpairs from a full symmetric eigendecomposition.",
    )


@knext.parameter_group(label="Map Settings")
class MapSettings:
    """
    Method used to build the map and which brands enter the standardization and the distance matrix.
    """

    strategy = knext.EnumParameter(
        label="Mapping method",
        description="Choose how brand and attribute coordinates are derived from the standardized performance matrix.",
        default_value=MapStrategyOptions.CLASSICAL_MDS.name,
        enum=MapStrategyOptions,
    )

    reference_brands = knext.EnumParameter(
        label="Standardization reference",
        description="Brands whose mean and standard deviation define the z-scores of each attribute. The z-scores are applied to all brands.",
        default_value=BrandPolicyOptions.ALL_BRANDS.name,
        enum=BrandPolicyOptions,
    )

    active_brands = knext.EnumParameter(
        label="Brands fitted by the map",
        description="Brands entering the distance matrix (Classical MDS) or the component fit (PCA Biplot).",
        default_value=BrandPolicyOptions.ALL_BRANDS.name,
        enum=BrandPolicyOptions,
    )

    eigen_solver = knext.EnumParameter(
        label="Eigen solver",
        description="Eigen-decomposition used by Classical MDS.",
        default_value=EigenSolverOptions.POWER_ITERATION.name,
        enum=EigenSolverOptions,
    ).rule(knext.OneOf(strategy, [MapStrategyOptions.PCA_BIPLOT.name]), knext.Effect.HIDE)

    power_iterations = knext.IntParameter(
        label="Power iterations",
        description="Fixed number of power-iteration steps per eigenpair.",
        default_value=100,
        min_value=1,
        max_value=10000,
    ).rule(knext.OneOf(eigen_solver, [EigenSolverOptions.EXACT.name]), knext.Effect.HIDE)


@knext.parameter_group(label="Attribute Placement")
class PlacementSettings:
    """
    Tuning constants of the attribute layout used by Classical MDS. They are layout parameters, not estimates.
    """

    weight_gamma = knext.DoubleParameter(
        label="Weight exponent",
        description="Brands pull an attribute with weight (score - 1) ^ exponent. Values below 1 let mid-range performers still pull noticeably; values above 1 favour the leader.",
        default_value=0.5,
        min_value=0.0,
    )
    weight_floor = knext.DoubleParameter(
        label="Weight floor",
        description="Lower bound of (score - 1) before the exponent, so a brand scored 1 keeps a small pull.",
        default_value=1e-4,
        min_value=1e-9,
    )
    stretch = knext.DoubleParameter(
        label="Stretch",
        description="Factor applied to the weighted brand centroid to push attributes slightly outward from the brands.",
        default_value=1.15,
        min_value=0.01,
    )
    beta_ideal = knext.DoubleParameter(
        label="Ideal offset strength",
        description="Attributes move along the direction towards the ideal brand by (ideal score - mean score of other brands) times this value.",
        default_value=1.0,
    )
    repel_radius = knext.DoubleParameter(
        label="Repulsion radius",
        description="Attributes closer than this distance (in unnormalized map units) are pushed apart.",
        default_value=7.0,
        min_value=0.001,
    )
    repel_strength = knext.DoubleParameter(
        label="Repulsion strength",
        description="Size of the push applied to a pair of attributes that are too close.",
        default_value=0.7,
        min_value=0.0,
    )
    repel_passes = knext.IntParameter(
        label="Repulsion passes",
        description="Number of passes over all attribute pairs.",
        default_value=3,
        min_value=0,
        max_value=100,
    )


@knext.node(
    name="Perceptual Map",
    node_type=knext.NodeType.LEARNER,
    icon_path="icons/icon.png",
    category=perceptual_map_ext.main_category,
    keywords=[
        "Perceptual Map",
        "Positioning Map",
        "Brand Positioning",
        "Multidimensional Scaling",
        "MDS",
        "Market Research",
        "Survey",
    ],
    id="perceptual_map",
)
@knext.input_table(
    name="Performance Ratings",
    description="Long-format survey ratings with one row per rating: a brand column, an attribute column and a numeric rating on a 1–5 scale. Rows with missing values are ignored.",
)
@knext.output_table(
    name="Brand Coordinates",
    description="Normalized map position of every brand, whether it is the ideal (benchmark) brand, and its map distance to the ideal brand.",
)
@knext.output_table(
    name="Attribute Coordinates",
    description="Normalized map position of every attribute and its sensitivity (length of the attribute vector).",
)
@knext.output_table(
    name="Performance Means",
    description="Mean performance per brand and attribute after reversing reversed attributes, with the number of ratings behind each mean.",
)
class PerceptualMapLearner:
    """
    Positions brands and attributes on a two-dimensional perceptual map derived from survey performance ratings.

    ## Method

    1. **Aggregation**: ratings are averaged per brand and attribute. Ratings of *reversed* attributes (where a lower rating is better, e.g. price) are mirrored as 6 − rating. A brand/attribute pair without ratings gets the neutral value 3.
    2. **Standardization**: each attribute is z-scored with the mean and population standard deviation of the reference brands. Constant attributes become zero columns.
    3. **Classical MDS**: Euclidean distances between the standardized brand profiles are double-centered and the two dominant eigenpairs give the brand coordinates.
    4. **Attribute placement**: each attribute sits at the centroid of the brands weighted by their performance on it, stretched outward, shifted along the direction to the ideal brand when the ideal brand outperforms the other brands, and separated from nearby attributes by a light repulsion.
    5. **Normalization**: brands and attributes are scaled together so the farthest point lies on the unit circle.

    The **PCA Biplot** method replaces steps 3–4 by a principal component analysis of the standardized profiles.

    ## Ideal Brand

    The ideal (benchmark) brand is the brand whose name equals the *Benchmark brand* setting (case-insensitive). Without a match, the first brand whose name contains "IDEAL" is used. Without an ideal brand, attributes are placed without the ideal offset and distances to the ideal are missing.

    ## Outputs

    - **Brand Coordinates**: X, Y, ideal flag and distance to the ideal brand.
    - **Attribute Coordinates**: X, Y, reversed flag and sensitivity.
    - **Performance Means**: the aggregated matrix in long format.

    The node is deterministic: the same input always produces the same map.

    **References:**
    - Torgerson, W. S. (1952). Multidimensional scaling: I. Theory and method. *Psychometrika*, 17(4), 401–419.
    - Hauser, J. R., & Koppelman, F. S. (1979). Alternative perceptual mapping techniques: Relative accuracy and usefulness. *Journal of Marketing Research*, 16(4), 495–506.
    """

    brand_column = knext.ColumnParameter(
        label="Brand Column",
        description="String column naming the rated brand.",
        port_index=0,
        column_filter=kutil.is_string,
    )
    attribute_column = knext.ColumnParameter(
        label="Attribute Column",
        description="String column naming the rated attribute.",
        port_index=0,
        column_filter=kutil.is_string,
    )
    rating_column = knext.ColumnParameter(
        label="Rating Column",
        description="Numeric performance rating on a 1–5 scale.",
        port_index=0,
        column_filter=kutil.is_numeric,
    )
    benchmark = knext.StringParameter(
        label="Benchmark brand",
        description="Name of the ideal (benchmark) brand. Leave empty to use the first brand whose name contains 'IDEAL'.",
        default_value="",
    )
    reversed_attributes = knext.StringParameter(
        label="Reversed attributes",
        description="Comma separated attribute names for which a lower rating means better standing (e.g. price).",
        default_value="",
    )

    map_settings = MapSettings()
    placement = PlacementSettings()

    def configure(self, configure_context: knext.ConfigurationContext, input_schema: knext.Schema):
        self.brand_column = kutil.column_exists_or_preset(
            configure_context,
            self.brand_column,
            input_schema,
            kutil.is_string,
            none_msg="The ratings table needs a string column with brand names.",
        )
        self.attribute_column = kutil.column_exists_or_preset(
            configure_context,
            self.attribute_column,
            input_schema,
            kutil.is_string,
            none_msg="The ratings table needs a second string column with attribute names.",
            exclude=(self.brand_column,),
        )
        self.rating_column = kutil.column_exists_or_preset(
            configure_context,
            self.rating_column,
            input_schema,
            kutil.is_numeric,
            none_msg="The ratings table needs a numeric rating column.",
        )
        if self.brand_column == self.attribute_column:
            raise knext.InvalidParametersError("Brand and attribute columns must be different.")

        brand_schema = knext.Schema(
            [knext.string(), knext.double(), knext.double(), knext.bool_(), knext.double()],
            ["Brand", "X", "Y", "Ideal", "Distance to Ideal"],
        )
        attribute_schema = knext.Schema(
            [knext.string(), knext.bool_(), knext.double(), knext.double(), knext.double()],
            ["Attribute", "Reversed", "X", "Y", "Sensitivity"],
        )
        performance_schema = knext.Schema(
            [knext.string(), knext.string(), knext.double(), knext.int64()],
            ["Brand", "Attribute", "Mean Performance", "Ratings"],
        )
        return brand_schema, attribute_schema, performance_schema

    def execute(self, exec_context: knext.ExecutionContext, input_table: knext.Table):
        # Import heavy dependencies only when needed
        import numpy as np
        import pandas as pd
        from perceptual_map.aggregation import rating_counts
        from perceptual_map.config import PerceptualMapConfig
        from perceptual_map.engine import compute_perceptual_map
        from perceptual_map.project import project_from_frames

        df = input_table.to_pandas()
        if kutil.number_of_rows(df) == 0:
            raise knext.InvalidParametersError("Input table is empty. Please provide at least one rating.")

        missing = int(kutil.count_missing_values(df[self.rating_column]))
        if missing:
            exec_context.set_warning(f"{missing} rows with a missing rating were ignored.")
        out_of_scale = kutil.count_out_of_range(df[self.rating_column], 1, 5)
        if out_of_scale:
            exec_context.set_warning(f"{out_of_scale} ratings fall outside the 1–5 scale; reversed attributes assume that scale.")
            LOGGER.warning(f"{out_of_scale} ratings outside the 1-5 scale")

        project = project_from_frames(
            df,
            self.brand_column,
            self.attribute_column,
            self.rating_column,
            reversed_attributes=kutil.split_id_list(self.reversed_attributes),
            benchmark=self.benchmark.strip(),
        )
        if not project.brands:
            raise knext.InvalidParametersError("No complete ratings found. Check the selected columns for missing values.")

        config = PerceptualMapConfig(
            strategy=self.map_settings.strategy,
            reference_brands=self.map_settings.reference_brands,
            active_brands=self.map_settings.active_brands,
            eigen_solver=self.map_settings.eigen_solver,
            power_iterations=self.map_settings.power_iterations,
            weight_gamma=self.placement.weight_gamma,
            weight_floor=self.placement.weight_floor,
            stretch=self.placement.stretch,
            beta_ideal=self.placement.beta_ideal,
            repel_radius=self.placement.repel_radius,
            repel_strength=self.placement.repel_strength,
            repel_passes=self.placement.repel_passes,
        )
        exec_context.set_progress(0.3)

        pmap = compute_perceptual_map(project, config)
        if pmap.ideal_index is None:
            exec_context.set_warning("No ideal brand found; distances to the ideal are missing and attributes carry no ideal offset.")
        exec_context.set_progress(0.8)

        brand_names = [brand.name for brand in project.brands]
        distances = pmap.distances_to_ideal()
        brand_df = pd.DataFrame(
            {
                "Brand": brand_names,
                "X": pmap.brand_coords[:, 0],
                "Y": pmap.brand_coords[:, 1],
                "Ideal": [index == pmap.ideal_index for index in range(len(brand_names))],
                "Distance to Ideal": distances if distances is not None else np.full(len(brand_names), np.nan),
            }
        )

        attribute_df = pd.DataFrame(
            {
                "Attribute": [attribute.id for attribute in project.attributes],
                "Reversed": [attribute.reversed for attribute in project.attributes],
                "X": pmap.attr_coords[:, 0],
                "Y": pmap.attr_coords[:, 1],
                "Sensitivity": pmap.attribute_sensitivity(),
            }
        )

        counts = rating_counts(project.brands, project.attributes, project.responses)
        performance_df = pd.DataFrame(
            [
                (brand.name, attribute.id, float(pmap.performance[b, a]), int(counts[b, a]))
                for b, brand in enumerate(project.brands)
                for a, attribute in enumerate(project.attributes)
            ],
            columns=["Brand", "Attribute", "Mean Performance", "Ratings"],
        )
        performance_df["Ratings"] = performance_df["Ratings"].astype("int64")

        return (
            knext.Table.from_pandas(brand_df),
            knext.Table.from_pandas(attribute_df),
            knext.Table.from_pandas(performance_df),
        )
