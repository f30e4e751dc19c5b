from forecaster import settings
from forecaster.pipelines.source import SourcePipeline


class SalesPipeline(SourcePipeline):
    source_type = "sales"
    filename_prefix = settings.SALES_FILENAME_PREFIX
