from typing import List, Optional
import pandas as pd

from fieldcluster.clustering.common import ClusterResult
from fieldcluster.utils.entities import Customer, coordinates_of, get_field

CUSTOMER_COLUMNS = {
    'Customer_ID': 'id',
    'Latitude': 'lat',
    'Longitude': 'lng',
    'Area': 'area',
    'Category': 'category',
}


def _optional(value):
    """Turn pandas missing values (NaN, None, NaT) into None."""
    return None if pd.isna(value) else value


def customers_from_frame(df: pd.DataFrame, columns: Optional[dict] = None) -> List[Customer]:
    """Build Customer records from a DataFrame.

    ``columns`` maps DataFrame column names to Customer fields and defaults to
    ``CUSTOMER_COLUMNS``. Missing coordinates become None, so those customers
    are reported as noise by the clustering step. Other columns are kept in
    ``Customer.extra``.
    """
    columns = columns or CUSTOMER_COLUMNS
    df = df.rename(columns=columns)
    if 'id' not in df.columns:
        raise ValueError("Missing customer id column in customer data.")

    extra_cols = [c for c in df.columns if c not in CUSTOMER_COLUMNS.values()]
    customers = []
    for record in df.to_dict(orient='records'):
        lat, lng = _optional(record.get('lat')), _optional(record.get('lng'))
        customers.append(Customer(
            id=record['id'],
            lat=float(lat) if lat is not None else None,
            lng=float(lng) if lng is not None else None,
            area=_optional(record.get('area')),
            category=_optional(record.get('category')),
            extra={c: record[c] for c in extra_cols},
        ))
    return customers


def clusters_to_frame(result: ClusterResult, area_field: str = 'area') -> pd.DataFrame:
    """One row per entity: cluster membership plus cluster metadata.

    Noise rows have ``Cluster_ID`` None. Clusters are numbered from 1 in
    result order.
    """
    rows = []

    def row(entity, cluster_id=None, cluster=None):
        coords = coordinates_of(entity)
        return {
            'Cluster_ID': cluster_id,
            'Cluster_Label': cluster.area_label if cluster else None,
            'Customer_ID': get_field(entity, 'id'),
            'Area': get_field(entity, area_field),
            'Latitude': coords[0] if coords else None,
            'Longitude': coords[1] if coords else None,
            'Centroid_Latitude': cluster.centroid.lat if cluster else None,
            'Centroid_Longitude': cluster.centroid.lng if cluster else None,
            'Radius_Km': cluster.radius_km if cluster else None,
        }

    for cluster_id, cluster in enumerate(result.clusters, start=1):
        rows.extend(row(member, cluster_id, cluster) for member in cluster.members)
    rows.extend(row(entity) for entity in result.noise)

    return pd.DataFrame(rows, columns=[
        'Cluster_ID', 'Cluster_Label', 'Customer_ID', 'Area', 'Latitude', 'Longitude',
        'Centroid_Latitude', 'Centroid_Longitude', 'Radius_Km'
    ])
