# users/serializers.py
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import exceptions, serializers

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """
    유저 기본 직렬화기
    - username/id는 읽기전용 (아이디 변경 방지)
    - is_active는 일반 PATCH로는 수정 불가
    """

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "daily_calorie_goal",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "username", "is_active", "created_at", "updated_at"]

    def validate_email(self, value):
        value = value.strip().lower()
        qs = User.objects.filter(email=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("이미 등록된 이메일입니다.")
        return value


class RegisterSerializer(serializers.ModelSerializer):
    """
    회원가입 전용 Serializer
    - username/email 중복 체크
    - Django 비밀번호 정책 적용(validate_password)
    - create_user() 사용으로 비밀번호 해시 자동 처리
    """

    password = serializers.CharField(write_only=True, trim_whitespace=False)
    password2 = serializers.CharField(
        write_only=True, trim_whitespace=False, required=False
    )
    daily_calorie_goal = serializers.IntegerField(required=False, min_value=1)

    class Meta:
        model = User
        fields = (
            "id",
            "username",
            "email",
            "password",
            "password2",
            "daily_calorie_goal",
        )
        read_only_fields = ("id",)

    # --- 필드 단위 검증 ---
    def validate_username(self, value):
        if not value:
            raise serializers.ValidationError("아이디를 입력하세요.")
        if User.objects.filter(username=value).exists():
            raise serializers.ValidationError("이미 사용 중인 아이디입니다.")
        return value

    def validate_email(self, value):
        value = (value or "").strip().lower()
        if not value:
            raise serializers.ValidationError("이메일을 입력하세요.")
        if User.objects.filter(email=value).exists():
            raise serializers.ValidationError("이미 등록된 이메일입니다.")
        return value

    # --- 교차 검증 ---
    def validate(self, attrs):
        pw = attrs.get("password")
        pw2 = attrs.get("password2")
        if pw2 is not None and pw != pw2:
            raise serializers.ValidationError(
                {"password2": ["비밀번호 확인이 일치하지 않습니다."]}
            )
        validate_password(pw)
        return attrs

    # --- 생성 로직 ---
    def create(self, validated_data):
        password = validated_data.pop("password")
        validated_data.pop("password2", None)
        return User.objects.create_user(password=password, **validated_data)


class LoginSerializer(serializers.Serializer):
    """
    이메일 로그인 검증
    - 이메일 형식 오류는 400, 자격 증명 불일치는 401
    - 계정 존재 여부를 드러내지 않도록 메시지는 동일하게 유지
    """

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        email = attrs["email"].strip().lower()
        user = User.objects.filter(email=email).first()
        if user is None or not user.is_active or not user.check_password(attrs["password"]):
            raise exceptions.AuthenticationFailed("이메일 또는 비밀번호가 올바르지 않습니다.")
        attrs["user"] = user
        return attrs
