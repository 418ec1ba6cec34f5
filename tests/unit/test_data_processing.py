import numpy as np
import pandas as pd
import pytest

from fieldcluster.clustering.proximity import cluster_entities
from fieldcluster.utils.data_processing import clusters_to_frame, customers_from_frame


def make_frame():
    return pd.DataFrame({
        'Customer_ID': ['C1', 'C2', 'C3', 'C4'],
        'Latitude': [59.9000, 59.9010, np.nan, 59.9000],
        'Longitude': [10.7000, 10.7000, 10.7, 10.7360],
        'Area': ['Majorstuen', 'Majorstuen', None, 'Sentrum'],
        'Phone': ['1', '2', '3', '4'],
    })


def test_customers_from_frame():
    customers = customers_from_frame(make_frame())
    assert [c.id for c in customers] == ['C1', 'C2', 'C3', 'C4']
    assert customers[2].lat is None
    assert customers[2].area is None
    assert customers[0].lat == 59.9
    assert customers[0].extra == {'Phone': '1'}


def test_customers_from_frame_custom_columns():
    df = pd.DataFrame({'kundenr': [7], 'lat': [59.9], 'lng': [10.7], 'poststed': ['Oslo']})
    customers = customers_from_frame(df, columns={'kundenr': 'id', 'poststed': 'area'})
    assert customers[0].id == 7
    assert customers[0].area == 'Oslo'


def test_customers_from_frame_requires_id():
    df = pd.DataFrame({'Latitude': [59.9], 'Longitude': [10.7]})
    with pytest.raises(ValueError, match="id"):
        customers_from_frame(df)


def test_clusters_to_frame(params):
    customers = customers_from_frame(make_frame())
    result = cluster_entities(customers, 1, params)
    df = clusters_to_frame(result)

    assert len(df) == 4
    clustered = df[df['Cluster_ID'].notna()]
    assert clustered['Customer_ID'].tolist() == ['C1', 'C2']
    assert (clustered['Cluster_Label'] == 'Majorstuen').all()
    noise = df[df['Cluster_ID'].isna()]
    assert set(noise['Customer_ID']) == {'C3', 'C4'}
    assert noise.loc[noise['Customer_ID'] == 'C3', 'Latitude'].isna().all()
