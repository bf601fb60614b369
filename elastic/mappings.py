def mapping_transactions():
    props = {
        "id": {"type": "long"},
        "title": {"type": "text", "fields": {"raw": {"type": "keyword"}}},
        "description": {"type": "text", "fields": {"raw": {"type": "keyword"}}},
        "price": {"type": "double"},
        # raw keeps the ISO text so a month can be matched for any year
        "dateOfSale": {"type": "date", "fields": {"raw": {"type": "keyword"}}},
        "category": {"type": "keyword"},
        "sold": {"type": "boolean"},
        "image": {"type": "keyword", "index": False},
    }
    return {
        # single shard keeps index order stable for paging
        "settings": {"number_of_shards": 1},
        "mappings": {"properties": props},
    }
