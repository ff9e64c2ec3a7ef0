from typing import NewType

AssetName = NewType('AssetName', str)
OperationName = NewType('OperationName', str)
