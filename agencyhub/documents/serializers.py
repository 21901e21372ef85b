from rest_framework import serializers
from .models import Document, Design, AdvertisingAsset
from .storage import public_url


class DocumentSerializer(serializers.ModelSerializer):
    file = serializers.FileField(write_only=True, required=False)
    file_url = serializers.SerializerMethodField()
    project_name = serializers.CharField(source='project.name', read_only=True, default=None)
    created_by_name = serializers.CharField(source='created_by.display_name', read_only=True, default=None)

    class Meta:
        model = Document
        fields = ['id', 'title', 'content', 'project', 'project_name', 'file', 'file_path', 'file_name',
                  'file_size', 'file_type', 'file_url', 'created_by', 'created_by_name', 'created_at', 'updated_at']
        read_only_fields = ['file_path', 'file_name', 'file_size', 'file_type', 'created_by', 'created_at', 'updated_at']

    def get_file_url(self, obj):
        return public_url(obj.file_path)

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Document title cannot be blank")
        return value


class DesignSerializer(serializers.ModelSerializer):
    file = serializers.FileField(write_only=True, required=False)
    tags = serializers.ListField(child=serializers.CharField(max_length=50), required=False)
    public_url = serializers.SerializerMethodField()
    thumbnail_url = serializers.SerializerMethodField()
    project_name = serializers.CharField(source='project.name', read_only=True, default=None)
    created_by_name = serializers.CharField(source='created_by.display_name', read_only=True, default=None)

    class Meta:
        model = Design
        fields = ['id', 'title', 'description', 'project', 'project_name', 'tags', 'file', 'file_path',
                  'file_name', 'file_size', 'thumbnail_path', 'public_url', 'thumbnail_url',
                  'created_by', 'created_by_name', 'created_at', 'updated_at']
        read_only_fields = ['file_path', 'file_name', 'file_size', 'thumbnail_path', 'created_by',
                            'created_at', 'updated_at']

    def get_public_url(self, obj):
        return public_url(obj.file_path)

    def get_thumbnail_url(self, obj):
        return public_url(obj.thumbnail_path)

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Design title cannot be blank")
        return value

    def validate(self, attrs):
        if self.instance is None and not attrs.get('file'):
            raise serializers.ValidationError({'file': 'A design file is required'})
        return attrs


class RecordSerializer(serializers.Serializer):
    """Row in the records-management listing (documents and designs together)"""
    id = serializers.IntegerField()
    kind = serializers.CharField()
    title = serializers.CharField()
    file_name = serializers.CharField(allow_null=True)
    file_url = serializers.CharField(allow_null=True)
    project_name = serializers.CharField(allow_null=True)
    created_by_name = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField()


class AdvertisingAssetSerializer(serializers.ModelSerializer):
    file = serializers.FileField(write_only=True)
    public_url = serializers.SerializerMethodField()
    created_by_name = serializers.CharField(source='created_by.display_name', read_only=True, default=None)

    class Meta:
        model = AdvertisingAsset
        fields = ['id', 'title', 'description', 'asset_type', 'file', 'file_path', 'file_name', 'file_size',
                  'public_url', 'coverage', 'expense_amount', 'status', 'created_by', 'created_by_name',
                  'created_at', 'updated_at']
        read_only_fields = ['asset_type', 'file_path', 'file_name', 'file_size', 'status', 'created_by',
                            'created_at', 'updated_at']

    def get_public_url(self, obj):
        return public_url(obj.file_path)

    def validate_expense_amount(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("Expense amount cannot be negative")
        return value
