from django.contrib.auth import authenticate, get_user_model
from rest_framework import serializers

User = get_user_model()


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        # USERNAME_FIELD is email, so Django's backend authenticates by it
        user = authenticate(
            request=self.context.get("request"),
            email=attrs.get("email", "").lower(),
            password=attrs.get("password"),
        )

        if not user:
            raise serializers.ValidationError("Email ou senha inválidos")

        attrs["user"] = user
        return attrs
